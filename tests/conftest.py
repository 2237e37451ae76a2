"""Root test configuration: bundled themes and content-tree builders"""

from pathlib import Path

import pytest

from mdpost.config import Settings
from mdpost.core.theme import load_themes


_PROJECT_ROOT = Path(__file__).parent.parent

LIGHT_THEME = _PROJECT_ROOT / "assets" / "light-colorblind.json"
DARK_THEME = _PROJECT_ROOT / "assets" / "dark-default.json"


@pytest.fixture(name="content_root")
def content_root_fixture(tmp_path):
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture(name="settings")
def settings_fixture(content_root):
    return Settings(
        content_root=str(content_root),
        light_theme=str(LIGHT_THEME),
        dark_theme=str(DARK_THEME),
    )


@pytest.fixture(name="themes", scope="session")
def themes_fixture():
    return load_themes(Settings(light_theme=str(LIGHT_THEME), dark_theme=str(DARK_THEME)))


@pytest.fixture(name="write_post")
def write_post_fixture(content_root):
    """Return a helper that writes content/<slug>/index.mdx and returns its path."""
    def _write(slug: str, text: str, filename: str = "index.mdx") -> Path:
        folder = content_root / slug
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / filename
        path.write_text(text, encoding="utf-8")
        return path
    return _write
