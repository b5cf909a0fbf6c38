"""Shared fixtures for crud unit tests"""

import pytest
from sqlmodel import Session

from blockpub.crud.database import init_db, make_engine
from blockpub.crud.documents import create_document
from blockpub.crud.models import DocumentKind


BLOCK_RECORDS = [
    {"id": "h1", "type": "header", "content": {"text": "Hello", "level": "h1"}, "style": {}, "order": 0},
    {"id": "t1", "type": "text", "content": {"text": "World"}, "style": {}, "order": 1},
]


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="records")
def records_fixture():
    return [dict(r) for r in BLOCK_RECORDS]


@pytest.fixture(name="doc")
def doc_fixture(session, records):
    """A blog document with two blocks, flushed to the session."""
    return create_document(session, DocumentKind.blog, "Test Doc", blocks=records)
