"""Legacy markdown import: frontmatter extraction and markdown-it token to block conversion"""

import re
from pathlib import Path
from typing import Any

import yaml
from markdown_it import MarkdownIt

from blockpub.core.models import Block, BlockType, apply_content_patch, new_block


FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)
HEADER_LEVELS = ("h1", "h2", "h3")


def _make_parser(preset: str = "commonmark") -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset)


def strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def _header_level(token) -> str:
    """h1-h3 tag for a heading_open token; deeper headings clamp to h3."""
    return token.tag if token.tag in HEADER_LEVELS else HEADER_LEVELS[-1]


def _close_index(tokens: list, i: int) -> int:
    """Index of the token closing the block opened at i."""
    depth = 0
    for j in range(i, len(tokens)):
        depth += tokens[j].nesting
        if depth == 0:
            return j
    return len(tokens) - 1


def _inline_texts(tokens: list) -> list[str]:
    return [t.content for t in tokens if t.type == "inline" and t.content]


def _image_only(inline) -> Any:
    """The image token if an inline token holds nothing but one image, else None."""
    children = [c for c in (inline.children or []) if c.type not in ("softbreak", "hardbreak")]
    if len(children) == 1 and children[0].type == "image":
        return children[0]
    return None


def _block(block_type: BlockType, position: int, **content) -> Block:
    return apply_content_patch(new_block(block_type, order=position), content)


def tokens_to_blocks(tokens: list) -> list[Block]:
    """Convert a top-level markdown-it token stream into ordered editor blocks."""
    blocks: list[Block] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        end = _close_index(tokens, i) if tok.nesting == 1 else i
        inner = tokens[i + 1:end]
        pos = len(blocks)

        if tok.type == "heading_open":
            blocks.append(_block(BlockType.header, pos, text=" ".join(_inline_texts(inner)), level=_header_level(tok)))
        elif tok.type == "paragraph_open":
            inline = next((t for t in inner if t.type == "inline"), None)
            image = _image_only(inline) if inline is not None else None
            if image is not None:
                blocks.append(_block(BlockType.image, pos, url=image.attrGet("src") or "", alt=image.content))
            elif inline is not None and inline.content:
                blocks.append(_block(BlockType.text, pos, text=inline.content))
        elif tok.type in ("bullet_list_open", "ordered_list_open"):
            list_type = "numbered" if tok.type == "ordered_list_open" else "bullet"
            blocks.append(_block(BlockType.list, pos, items=_inline_texts(inner), listType=list_type))
        elif tok.type == "blockquote_open":
            blocks.append(_block(BlockType.quote, pos, text="\n".join(_inline_texts(inner))))
        elif tok.type == "hr":
            blocks.append(_block(BlockType.divider, pos))

        i = end + 1
    return blocks


def markdown_to_blocks(text: str, preset: str = "commonmark") -> tuple[dict[str, Any], list[Block]]:
    """Parse markdown (with optional YAML frontmatter) into (frontmatter, blocks)."""
    frontmatter, body = strip_frontmatter(text)
    return frontmatter, tokens_to_blocks(_make_parser(preset).parse(body))


def import_file(path: Path, preset: str = "commonmark") -> tuple[dict[str, Any], list[Block]]:
    return markdown_to_blocks(path.read_text(encoding="utf-8"), preset)
