"""Shared fixtures for core unit tests"""

import pytest

from blockpub.core.editor import DocumentEditor
from blockpub.core.models import Block


SAMPLE_MD = """\
---
title: Winter Newsletter
slug: winter-2024
---

# Winter Newsletter

Welcome to our **winter** update.

## Highlights

- New branch in Truro
- Training days

1. Apply online
2. Attend interview

> Caring is what we do.

![Team photo](https://cdn.example.com/team.jpg)

---

Footer paragraph.
"""


@pytest.fixture(name="changes")
def changes_fixture():
    """List collecting every block list pushed to on_change."""
    return []


@pytest.fixture(name="editor")
def editor_fixture(changes):
    """Empty editor recording change notifications."""
    return DocumentEditor(on_change=changes.append, document_id="doc-1")


@pytest.fixture(name="filled")
def filled_fixture(changes):
    """Editor with header, text, image, list blocks at orders 0..3."""
    editor = DocumentEditor(on_change=changes.append, document_id="doc-1")
    for t in ("header", "text", "image", "list"):
        editor.add_block(t)
    changes.clear()
    return editor


@pytest.fixture(name="styled_block")
def styled_block_fixture():
    return Block(id="b1", type="text", content={"text": "hi"},
                 style={"fontSize": "24px", "color": "#ff0000"}, order=0)


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD
