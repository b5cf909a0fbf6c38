"""Root test configuration: runtime artifact cleanup and environment isolation"""

import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_ARTIFACTS = ("blockpub.db", "test.db", ".blockpub", "dist")


@pytest.fixture(autouse=True)
def isolate_upload_env(monkeypatch):
    """Keep a developer's upload credentials out of every test."""
    monkeypatch.delenv("BLOCKPUB_UPLOAD_URL", raising=False)
    monkeypatch.delenv("BLOCKPUB_UPLOAD_TOKEN", raising=False)


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files, logs, and export output left in the project root."""
    yield
    for name in _ARTIFACTS:
        p = _PROJECT_ROOT / name
        if p.is_dir():
            shutil.rmtree(p)
        elif p.exists():
            p.unlink()
