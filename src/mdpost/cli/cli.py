"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdpost.cli.commands import headings_cmd, list_cmd, render_cmd, show_cmd


app = typer.Typer(name="mdpost", no_args_is_help=True, help="Inspect and compile MDX blog posts")

app.command(name="list")(list_cmd)
app.command(name="show")(show_cmd)
app.command(name="headings")(headings_cmd)
app.command(name="render")(render_cmd)
