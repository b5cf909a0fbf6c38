"""Block data model: the closed type set, default content, and persisted record shape"""

from enum import Enum
from typing import Any, Iterable, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class BlockType(str, Enum):
    """Restrict content blocks to the editor's fixed set of elements"""
    header = "header"
    text = "text"
    image = "image"
    quote = "quote"
    list = "list"
    divider = "divider"
    spacer = "spacer"
    button = "button"


_DEFAULT_CONTENT: dict[BlockType, dict[str, Any]] = {
    BlockType.header:  {"text": "", "level": "h1"},
    BlockType.text:    {"text": ""},
    BlockType.image:   {"url": "", "alt": ""},
    BlockType.quote:   {"text": "", "author": ""},
    BlockType.list:    {"items": [], "listType": "bullet"},
    BlockType.divider: {},
    BlockType.spacer:  {"height": "40px"},
    BlockType.button:  {"text": "", "url": ""},
}


def parse_block_type(value: str) -> BlockType | None:
    """Return the BlockType for value, or None if it is outside the closed set."""
    try:
        return BlockType(value)
    except ValueError:
        return None


def default_content_for(block_type: BlockType | str) -> dict[str, Any]:
    """Fresh default content for a newly created block of the given type.

    Every expected key is present (possibly empty) so renderers never need to
    null-check. Raises ValueError for a type outside the closed set.
    """
    bt = BlockType(block_type)
    return {k: (list(v) if isinstance(v, list) else v) for k, v in _DEFAULT_CONTENT[bt].items()}


class Block(BaseModel):
    """One unit of document content; replaced wholesale on every edit."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: str                                       # kept verbatim, may be unknown to this version
    content: dict[str, Any] = Field(default_factory=dict)
    style: Optional[dict[str, Any]] = None          # None = no style field; {} = explicitly empty
    order: int = Field(default=0, ge=0)

    @property
    def block_type(self) -> BlockType | None:
        return parse_block_type(self.type)


def new_block(block_type: BlockType | str, order: int) -> Block:
    """Create a block with type-specific default content and an empty style map."""
    bt = BlockType(block_type)
    return Block(id=str(uuid4()), type=bt.value, content=default_content_for(bt), style={}, order=order)


def apply_content_patch(block: Block, patch: dict[str, Any]) -> Block:
    """Shallow-merge patch into block.content and return the replacement block."""
    return block.model_copy(update={"content": {**block.content, **patch}})


def apply_style_patch(block: Block, patch: dict[str, Any]) -> Block:
    """Shallow-merge patch into block.style and return the replacement block."""
    return block.model_copy(update={"style": {**(block.style or {}), **patch}})


def _valid_order(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def block_from_record(record: dict[str, Any], position: int = 0) -> Block:
    """Build a Block from a persisted record, recovering malformed fields locally.

    Non-mapping content becomes {} and non-mapping style becomes None. A
    missing id gets a fresh one, and an order that is not a non-negative int
    falls back to position. A style key present as null stays present.
    """
    content = record.get("content")
    fields: dict[str, Any] = {
        "id": str(record.get("id") or uuid4()),
        "type": str(record.get("type") or ""),
        "content": dict(content) if isinstance(content, dict) else {},
        "order": record["order"] if _valid_order(record.get("order")) else position,
    }
    if "style" in record:
        style = record["style"]
        fields["style"] = dict(style) if isinstance(style, dict) else None
    return Block(**fields)


def block_to_record(block: Block) -> dict[str, Any]:
    """Serialize to {id, type, content, style, order}.

    style is omitted only when the block never had the key; an explicit null
    is written back as null.
    """
    record = block.model_dump(mode="json")
    if block.style is None and "style" not in block.model_fields_set:
        record.pop("style")
    return record


def blocks_from_records(records: Iterable[dict[str, Any]] | None) -> list[Block]:
    return [block_from_record(r, position=i) for i, r in enumerate(records or [])]


def blocks_to_records(blocks: Iterable[Block]) -> list[dict[str, Any]]:
    """Serialize blocks in ascending order for the save collaborator."""
    return [block_to_record(b) for b in sorted(blocks, key=lambda b: b.order)]
