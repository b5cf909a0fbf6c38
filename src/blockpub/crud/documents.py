"""Document persistence: create, lookup, block list save/load, publish, delete"""

from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from sqlmodel import Session, select

from blockpub.core.models import Block, blocks_from_records
from blockpub.core.utils.hashing import records_hash
from blockpub.core.utils.slug import slugify
from blockpub.crud.models import Document, DocumentKind


logger = structlog.get_logger()


def get_by_id(session: Session, document_id: UUID | str) -> Document | None:
    """Return the Document with the given id, or None if not found."""
    doc_id = document_id if isinstance(document_id, UUID) else UUID(str(document_id))
    return session.get(Document, doc_id)


def get_by_slug(session: Session, slug: str) -> Document | None:
    """Return the Document with the given slug, or None if not found."""
    return session.exec(select(Document).where(Document.slug == slug)).one_or_none()


def list_documents(
    session: Session,
    kind: DocumentKind | None = None,
    published: bool | None = None,
    ) -> list[Document]:
    """Return documents newest first, optionally filtered by kind and published flag."""
    query = select(Document)
    if kind is not None:
        query = query.where(Document.kind == kind)
    if published is not None:
        query = query.where(Document.is_published == published)
    return list(session.exec(query.order_by(Document.created_at.desc())).all())


def create_document(
    session: Session,
    kind: DocumentKind,
    title: str,
    slug: str | None = None,
    blocks: list[dict[str, Any]] | None = None,
    excerpt: str | None = None,
    author: str | None = None,
    read_time: str | None = None,
    ) -> Document:
    """Insert a new document. Raises ValueError on an empty or duplicate slug.

    Flushes but does not commit; caller controls the transaction.
    """
    slug = slug or slugify(title)
    if not slug:
        raise ValueError(f"Cannot derive a slug from title {title!r}")
    if get_by_slug(session, slug) is not None:
        raise ValueError(f"A document with slug '{slug}' already exists")

    records = list(blocks or [])
    doc = Document(
        kind=kind, slug=slug, title=title, blocks=records, hash=records_hash(records),
        excerpt=excerpt, author=author, read_time=read_time,
    )
    session.add(doc)
    session.flush()
    logger.info("document_created", document_id=str(doc.id), slug=slug, kind=kind.value)
    return doc


def save_blocks(
    session: Session,
    document_id: UUID | str,
    records: list[dict[str, Any]],
    ) -> tuple[Document, str]:
    """Replace a document's block array.

    Returns (doc, status) where status is 'updated' or 'unchanged' (same hash).
    Raises ValueError if the document does not exist.
    Flushes but does not commit; caller controls the transaction.
    """
    doc = get_by_id(session, document_id)
    if doc is None:
        raise ValueError(f"Document {document_id} not found")

    new_hash = records_hash(records)
    if doc.hash == new_hash:
        return doc, "unchanged"

    doc.blocks = list(records)
    doc.hash = new_hash
    doc.updated_at = datetime.now()
    session.add(doc)
    session.flush()
    logger.info("document_saved", document_id=str(doc.id), blocks=len(records))
    return doc, "updated"


def load_blocks(doc: Document) -> list[Block]:
    """Rebuild the document's blocks from its persisted records."""
    return blocks_from_records(doc.blocks)


def publish_document(session: Session, doc: Document, published: bool = True) -> Document:
    """Set the published flag; published_at records the first publication only."""
    doc.is_published = published
    if published and doc.published_at is None:
        doc.published_at = datetime.now()
    doc.updated_at = datetime.now()
    session.add(doc)
    session.flush()
    return doc


def delete_document(session: Session, document_id: UUID | str) -> bool:
    """Delete a document. Returns False if it did not exist."""
    doc = get_by_id(session, document_id)
    if doc is None:
        return False
    session.delete(doc)
    session.flush()
    logger.info("document_deleted", document_id=str(document_id))
    return True
