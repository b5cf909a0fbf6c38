"""Export pipeline: public HTML for a block document plus a sidecar JSON file"""

import json
import re
from html import escape
from pathlib import Path
from typing import Any, Callable, Iterable

from blockpub.core.models import Block, BlockType, blocks_to_records
from blockpub.crud.models import Document


_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

BUTTON_CLASSES = "inline-block bg-primary text-white px-4 py-2 rounded hover:bg-primary/90"


def css_property(name: str) -> str:
    """camelCase style key to its CSS property name (e.g. backgroundColor -> background-color)."""
    return _CAMEL_RE.sub("-", name).lower()


def style_to_css(style: dict[str, Any] | None) -> str:
    """Inline CSS declarations for the set keys of a style map, in insertion order."""
    if not style:
        return ""
    return "; ".join(f"{css_property(k)}: {v}" for k, v in style.items() if v)


def _style_attr(style: dict[str, Any] | None) -> str:
    css = style_to_css(style)
    return f' style="{escape(css)}"' if css else ""


def _text(content: dict[str, Any], key: str, default: str = "") -> str:
    value = content.get(key)
    return escape(value if isinstance(value, str) and value else default)


def _header(block: Block) -> str:
    level = block.content.get("level")
    tag = level if level in ("h1", "h2", "h3") else "h2"
    return f"<{tag}{_style_attr(block.style)}>{_text(block.content, 'text')}</{tag}>"


def _paragraph(block: Block) -> str:
    return f"<p{_style_attr(block.style)}>{_text(block.content, 'text')}</p>"


def _image_url(content: dict[str, Any]) -> str:
    """url, or the legacy src field written by older posts."""
    for key in ("url", "src"):
        value = content.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _image(block: Block) -> str:
    url = _image_url(block.content)
    if not url:
        return ""
    caption = _text(block.content, "caption")
    figure = (
        f'<div class="image-block"{_style_attr(block.style)}>'
        f'<img src="{escape(url)}" alt="{_text(block.content, "alt")}" class="w-full h-auto rounded-lg" />'
    )
    if caption:
        figure += f'<p class="text-sm text-gray-600 mt-2 italic">{caption}</p>'
    return figure + "</div>"


def _quote(block: Block) -> str:
    return (
        f'<blockquote class="border-l-4 border-primary pl-4 italic"{_style_attr(block.style)}>'
        f"{_text(block.content, 'text')}</blockquote>"
    )


def _list(block: Block) -> str:
    items = block.content.get("items")
    items = items if isinstance(items, list) else []
    numbered = block.content.get("listType") == "numbered"
    tag, cls = ("ol", "list-decimal") if numbered else ("ul", "list-disc")
    lis = "".join(f"<li>{escape(str(i))}</li>" for i in items)
    return f'<{tag} class="{cls} ml-6 space-y-1"{_style_attr(block.style)}>{lis}</{tag}>'


def _divider(block: Block) -> str:
    return f'<hr class="my-4"{_style_attr(block.style)} />'


def _spacer(block: Block) -> str:
    height = block.content.get("height")
    height = height if isinstance(height, str) and height else "40px"
    return f"<div{_style_attr({'height': height, **(block.style or {})})}></div>"


def _button(block: Block) -> str:
    return (
        f'<a href="{_text(block.content, "url", "#")}" class="{BUTTON_CLASSES}"{_style_attr(block.style)}>'
        f"{_text(block.content, 'text', 'Button')}</a>"
    )


HTML_RENDERERS: dict[BlockType, Callable[[Block], str]] = {
    BlockType.header:  _header,
    BlockType.text:    _paragraph,
    BlockType.image:   _image,
    BlockType.quote:   _quote,
    BlockType.list:    _list,
    BlockType.divider: _divider,
    BlockType.spacer:  _spacer,
    BlockType.button:  _button,
}


def render_block_html(block: Block) -> str:
    """HTML for one block; unknown types publish nothing."""
    renderer = HTML_RENDERERS.get(block.block_type)
    return renderer(block) if renderer else ""


def render_html(blocks: Iterable[Block]) -> str:
    """Public HTML body for blocks in ascending order, skipping empty renders."""
    parts = (render_block_html(b) for b in sorted(blocks, key=lambda b: b.order))
    return "\n".join(p for p in parts if p)


def first_image_url(blocks: Iterable[Block]) -> str | None:
    """URL of the first image block in render order, used as a post's listing image."""
    for b in sorted(blocks, key=lambda b: b.order):
        if b.block_type == BlockType.image:
            url = _image_url(b.content)
            if url:
                return url
    return None


def build_sidecar(doc: Document, blocks: list[Block]) -> dict:
    """Sidecar JSON: document metadata plus the persisted block records."""
    return {
        "slug": doc.slug,
        "kind": doc.kind.value if hasattr(doc.kind, "value") else doc.kind,
        "title": doc.title,
        "excerpt": doc.excerpt,
        "author": doc.author,
        "read_time": doc.read_time,
        "is_published": doc.is_published,
        "published_at": doc.published_at.isoformat() if doc.published_at else None,
        "image": first_image_url(blocks),
        "blocks": blocks_to_records(blocks),
    }


def write_document(doc: Document, blocks: list[Block], output_dir: Path) -> tuple[Path, Path]:
    """Write <slug>.html and <slug>.json under output_dir/<kind>/. Returns (html_path, json_path)."""
    kind = doc.kind.value if hasattr(doc.kind, "value") else str(doc.kind)
    dest_dir = output_dir / kind
    dest_dir.mkdir(parents=True, exist_ok=True)

    html_path = dest_dir / f"{doc.slug}.html"
    json_path = dest_dir / f"{doc.slug}.json"
    html_path.write_text(render_html(blocks) + "\n", encoding="utf-8")
    json_path.write_text(json.dumps(build_sidecar(doc, blocks), indent=2), encoding="utf-8")
    return html_path, json_path
