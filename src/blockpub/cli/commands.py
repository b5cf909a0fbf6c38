"""CLI command implementations"""

import asyncio
import mimetypes
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, Optional

import typer
from sqlmodel import Session

from blockpub.config import Settings, load_config
from blockpub.core.editor import DocumentEditor
from blockpub.core.export import write_document
from blockpub.core.importer import import_file
from blockpub.core.models import BlockType, blocks_to_records
from blockpub.core.renderers import BLOCK_DESCRIPTIONS
from blockpub.core.style_panel import StyleTab
from blockpub.core.upload import ImageUploadSession, Notice, UploadClient, UploadFile, upload_image
from blockpub.crud.database import init_db, make_engine, reset_db
from blockpub.crud.documents import (
    create_document,
    delete_document,
    get_by_slug,
    list_documents,
    load_blocks,
    publish_document,
    save_blocks,
)
from blockpub.crud.models import DocumentKind


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _engine(settings: Settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    return engine


def _resolve_block(editor: DocumentEditor, ref: str) -> str:
    """Resolve a full block id or a unique id prefix; exit on no or ambiguous match."""
    if editor.get(ref) is not None:
        return ref
    matches = [b.id for b in editor.blocks if b.id.startswith(ref)]
    if len(matches) != 1:
        _fail(f"Block '{ref}' not found" if not matches else f"Block prefix '{ref}' is ambiguous")
    return matches[0]


@contextmanager
def _editing(slug: str) -> Iterator[DocumentEditor]:
    """Open an editor on the document's blocks and save the result on clean exit."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        doc = get_by_slug(session, slug)
        if doc is None:
            _fail(f"No document with slug '{slug}'")
        editor = DocumentEditor(load_blocks(doc), document_id=str(doc.id))
        yield editor
        try:
            _, status = save_blocks(session, doc.id, editor.to_records())
            session.commit()
        except Exception as e:
            _fail("Save failed", e)
    typer.echo(f"{slug}: {status}")


def _echo_blocks(editor: DocumentEditor) -> None:
    """Print each block in render order with its bound control values."""
    for view, block in zip(editor.render(), editor.ordered_blocks()):
        typer.echo(f"[{block.order}] {block.id}  {view.label}  {view.preview}")
        for c in view.controls:
            value = str(c.value).replace("\n", " | ")
            typer.echo(f"      {c.name}: {value}")
        if view.style:
            typer.echo(f"      style: {view.style}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def new_cmd(
    title: Annotated[str, typer.Argument(help="Post or newsletter title")],
    kind: Annotated[DocumentKind, typer.Option("--kind", help="blog or newsletter")] = DocumentKind.blog,
    slug: Annotated[Optional[str], typer.Option("--slug", help="URL slug; derived from title if omitted")] = None,
    excerpt: Annotated[Optional[str], typer.Option("--excerpt", help="Short summary for listings")] = None,
    author: Annotated[Optional[str], typer.Option("--author", help="Author name")] = None,
    read_time: Annotated[Optional[str], typer.Option("--read-time", help='e.g. "5 min read"')] = None,
    ):
    """Create an empty document."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        try:
            doc = create_document(session, kind, title, slug, excerpt=excerpt, author=author, read_time=read_time)
            session.commit()
        except ValueError as e:
            _fail(str(e))
        typer.echo(f"Created {doc.kind.value} '{doc.slug}'")


def list_cmd(
    kind: Annotated[Optional[DocumentKind], typer.Option("--kind", help="Only list this kind")] = None,
    ):
    """List documents with their block counts and publish state."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        docs = list_documents(session, kind=kind)
        if not docs:
            typer.echo("No documents found in database.")
            raise typer.Exit(1)
        for d in docs:
            state = "published" if d.is_published else "draft"
            typer.echo(f"{d.slug}\t{d.kind.value}\t{state}\t{len(d.blocks)} block(s)\t{d.title}")


def show_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    ):
    """Show a document's blocks in render order."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        doc = get_by_slug(session, slug)
        if doc is None:
            _fail(f"No document with slug '{slug}'")
        editor = DocumentEditor(load_blocks(doc), document_id=str(doc.id))
    typer.echo(f"{doc.title} ({doc.kind.value}, {len(editor)} block(s))")
    if not len(editor):
        typer.echo("  Add blocks with 'blockpub add <slug> <type>':")
        for bt, description in BLOCK_DESCRIPTIONS.items():
            typer.echo(f"    {bt.value:<8} {description}")
        return
    _echo_blocks(editor)


def add_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    block_type: Annotated[BlockType, typer.Argument(help="Block type to append")],
    ):
    """Append a block with default content."""
    with _editing(slug) as editor:
        block = editor.add_block(block_type)
        typer.echo(f"Added {block.type} block {block.id} at position {block.order}")


def edit_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    block: Annotated[str, typer.Argument(help="Block id or unique id prefix")],
    control: Annotated[str, typer.Argument(help="Control name (e.g. text, level, items, alt)")],
    value: Annotated[str, typer.Argument(help="New value; list items are newline-separated")],
    ):
    """Edit one content field of a block."""
    with _editing(slug) as editor:
        block_id = _resolve_block(editor, block)
        try:
            editor.edit(block_id, control, value)
        except (KeyError, ValueError) as e:
            _fail(f"Cannot edit {block_id}", e)


def style_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    block: Annotated[str, typer.Argument(help="Block id or unique id prefix")],
    font_size: Annotated[Optional[str], typer.Option("--font-size", help="e.g. 16px")] = None,
    font_weight: Annotated[Optional[str], typer.Option("--font-weight", help="300-800")] = None,
    align: Annotated[Optional[str], typer.Option("--align", help="left, center or right")] = None,
    color: Annotated[Optional[str], typer.Option("--color", help="#rrggbb")] = None,
    background: Annotated[Optional[str], typer.Option("--background", help="#rrggbb or transparent")] = None,
    margin: Annotated[Optional[str], typer.Option("--margin", help="e.g. 16px")] = None,
    padding: Annotated[Optional[str], typer.Option("--padding", help="e.g. 16px")] = None,
    radius: Annotated[Optional[str], typer.Option("--radius", help="e.g. 8px")] = None,
    reset: Annotated[bool, typer.Option("--reset", help="Clear every style override")] = False,
    ):
    """Override a block's typography, colors, or spacing."""
    patch = {
        "fontSize": font_size, "fontWeight": font_weight, "textAlign": align,
        "color": color, "backgroundColor": background,
        "margin": margin, "padding": padding, "borderRadius": radius,
    }
    patch = {k: v for k, v in patch.items() if v is not None}

    with _editing(slug) as editor:
        panel = editor.open_style_editor(_resolve_block(editor, block))
        if reset:
            panel.reset()
        try:
            if patch:
                panel.update_style(patch)
        except ValueError as e:
            _fail("Invalid style", e)
        for tab in StyleTab:
            panel.select_tab(tab)
            for c in panel.controls():
                typer.echo(f"  {c.label}: {c.value}")
        panel.apply()


def move_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    source: Annotated[str, typer.Argument(help="Block to move")],
    target: Annotated[str, typer.Argument(help="Block whose position it takes")],
    ):
    """Move a block to another block's position."""
    with _editing(slug) as editor:
        if not editor.reorder(_resolve_block(editor, source), _resolve_block(editor, target)):
            typer.echo("Nothing to move.")


def delete_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    block: Annotated[str, typer.Argument(help="Block id or unique id prefix")],
    ):
    """Delete a block and renumber the rest."""
    with _editing(slug) as editor:
        editor.delete(_resolve_block(editor, block))


def upload_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    block: Annotated[str, typer.Argument(help="Image block id or unique id prefix")],
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Image file")],
    ):
    """Upload an image file into an image block."""
    settings = _settings()
    client = UploadClient(
        settings.upload_url, prefix=settings.upload_prefix, token=settings.upload_token,
        timeout=settings.upload_timeout, max_bytes=settings.max_upload_bytes,
    )
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    file = UploadFile(path.name, content_type, path.read_bytes())

    def _notify(notice: Notice) -> None:
        typer.echo(f"{notice.title}: {notice.description}", err=notice.error)

    with _editing(slug) as editor:
        block_id = _resolve_block(editor, block)
        if editor.get(block_id).block_type != BlockType.image:
            _fail(f"Block {block_id} is not an image block")
        if not asyncio.run(upload_image(editor, block_id, ImageUploadSession(client, _notify), file)):
            raise typer.Exit(1)


def import_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Markdown file")],
    kind: Annotated[DocumentKind, typer.Option("--kind", help="blog or newsletter")] = DocumentKind.blog,
    ):
    """Create a document from a markdown file (frontmatter title/slug honoured)."""
    settings = _settings()
    try:
        frontmatter, blocks = import_file(path)
    except ValueError as e:
        _fail(f"Failed to import {path}", e)
    title = str(frontmatter.get("title") or path.stem)
    meta = {k: str(frontmatter[k]) for k in ("excerpt", "author", "read_time") if frontmatter.get(k)}
    with Session(_engine(settings)) as session:
        try:
            doc = create_document(
                session, kind, title, frontmatter.get("slug"), blocks_to_records(blocks),
                **meta,
            )
            session.commit()
        except ValueError as e:
            _fail(str(e))
        typer.echo(f"Imported {len(blocks)} block(s) into '{doc.slug}'")


def export_cmd(
    slug: Annotated[Optional[str], typer.Argument(help="Document slug; omit with --all")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    all_docs: Annotated[bool, typer.Option("--all", help="Export every published document")] = False,
    ):
    """Write public HTML + sidecar JSON to the output dir."""
    settings = _settings(overrides={"output_dir": out})
    output_dir = Path(settings.output_dir)
    with Session(_engine(settings)) as session:
        if all_docs:
            docs = list_documents(session, published=True)
        elif slug:
            doc = get_by_slug(session, slug)
            docs = [doc] if doc else []
        else:
            _fail("Pass a slug or --all")

        if not docs:
            typer.echo("No documents to export.")
            raise typer.Exit(1)

        try:
            results = [write_document(d, load_blocks(d), output_dir) for d in docs]
        except OSError as e:
            _fail("Export failed", e)
    for html_path, _ in results:
        typer.echo(f"  -> {html_path}")
    typer.echo(f"Exported {len(results)} document(s) to {output_dir}/")


def publish_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    unpublish: Annotated[bool, typer.Option("--unpublish", help="Return the document to draft")] = False,
    ):
    """Mark a document as published (or back to draft)."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        doc = get_by_slug(session, slug)
        if doc is None:
            _fail(f"No document with slug '{slug}'")
        publish_document(session, doc, published=not unpublish)
        session.commit()
        typer.echo(f"{slug}: {'draft' if unpublish else 'published'}")


def remove_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    ):
    """Delete a document and all its blocks."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        doc = get_by_slug(session, slug)
        if doc is None:
            _fail(f"No document with slug '{slug}'")
        delete_document(session, doc.id)
        session.commit()
    typer.echo(f"Removed '{slug}'")
