"""Shared fixtures for core unit tests"""

import pytest

from mdpost.core.compiler import DocumentCompiler


SAMPLE_MDX = """\
---
title: Test Post
tags: [a, b]
---
import Chart from './Chart'

# Intro

A paragraph with **bold** text.

## Setup

```python {2}
import os
print(os.getcwd())
```

<Chart />

### Details
"""


@pytest.fixture(name="compiler")
def compiler_fixture(themes):
    return DocumentCompiler(themes, loaders={".js": "jsx"})


@pytest.fixture(name="post_dir")
def post_dir_fixture(tmp_path):
    """A post directory holding SAMPLE_MDX and the Chart component it imports."""
    folder = tmp_path / "sample"
    folder.mkdir()
    (folder / "index.mdx").write_text(SAMPLE_MDX)
    (folder / "Chart.js").write_text(
        "import React from 'react'\n"
        "export default function Chart() { return <div className=\"chart\" /> }\n"
    )
    return folder
