"""Per-type block renderers: editable views bound to content fields, and edit-to-patch mapping.

Each block type maps to one render function in RENDERERS. A render function
reads content with inline defaults (never assuming a key exists) and returns a
BlockView whose controls know how to turn raw user input into a content patch.
The block's style map is passed through untouched as the view's root style.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from blockpub.core.models import Block, BlockType


HEADER_LEVELS = [
    ("h1", "H1 - Main Heading"),
    ("h2", "H2 - Sub Heading"),
    ("h3", "H3 - Section Heading"),
]

LIST_TYPES = [
    ("bullet", "Bullet List"),
    ("numbered", "Numbered List"),
]

DEFAULT_SPACER_HEIGHT = "40px"
DEFAULT_BUTTON_LABEL = "Button"

BLOCK_LABELS: dict[BlockType, str] = {
    BlockType.header:  "Header",
    BlockType.text:    "Text",
    BlockType.image:   "Image",
    BlockType.quote:   "Quote",
    BlockType.list:    "List",
    BlockType.divider: "Divider",
    BlockType.spacer:  "Spacer",
    BlockType.button:  "Button",
}

BLOCK_DESCRIPTIONS: dict[BlockType, str] = {
    BlockType.header:  "Add a main heading",
    BlockType.text:    "Add paragraph text",
    BlockType.image:   "Add an image",
    BlockType.quote:   "Add a quote or testimonial",
    BlockType.list:    "Add a bullet or numbered list",
    BlockType.divider: "Add a visual separator",
    BlockType.spacer:  "Add white space",
    BlockType.button:  "Add a call-to-action button",
}


def _identity(raw: str) -> Any:
    return raw


@dataclass
class Control:
    """One editable input bound to a single content field."""
    name:        str
    field:       str
    kind:        str                    # text | textarea | select | url | upload
    value:       Any
    placeholder: str = ""
    options:     list[tuple[str, str]] = field(default_factory=list)
    parse:       Callable[[str], Any] = _identity

    def to_patch(self, raw: str) -> dict[str, Any]:
        """Translate raw input into a content patch; select inputs must pick a listed option."""
        if self.options and raw not in {value for value, _ in self.options}:
            raise ValueError(f"Invalid value {raw!r} for {self.name}")
        return {self.field: self.parse(raw)}


@dataclass
class BlockView:
    """Editable surface for one block."""
    block_id: str
    type:     str
    label:    str
    style:    dict[str, Any]
    preview:  str = ""
    controls: list[Control] = field(default_factory=list)
    unknown:  bool = False

    def control(self, name: str) -> Control:
        for c in self.controls:
            if c.name == name:
                return c
        raise KeyError(f"Block {self.block_id} ({self.type}) has no control {name!r}")


def _text(content: dict[str, Any], key: str, default: str = "") -> str:
    """String field with fallback; None or non-string values render as the default."""
    value = content.get(key)
    return value if isinstance(value, str) and value else default


def parse_list_text(raw: str) -> list[str]:
    """Split newline-delimited text into list items, discarding empty lines."""
    return [line for line in raw.split("\n") if line]


def format_list_text(items: Any) -> str:
    """Join list items with newlines for editing; anything but a list renders empty."""
    if not isinstance(items, list):
        return ""
    return "\n".join(str(i) for i in items)


def _view(block: Block, preview: str = "", controls: list[Control] | None = None) -> BlockView:
    bt = block.block_type
    return BlockView(
        block_id=block.id,
        type=block.type,
        label=BLOCK_LABELS[bt],
        style=dict(block.style or {}),
        preview=preview,
        controls=controls or [],
    )


def render_header(block: Block) -> BlockView:
    text = _text(block.content, "text")
    return _view(block, preview=text, controls=[
        Control("text", "text", "text", text, placeholder="Enter header text..."),
        Control("level", "level", "select", _text(block.content, "level", "h1"), options=HEADER_LEVELS),
    ])


def render_text(block: Block) -> BlockView:
    text = _text(block.content, "text")
    return _view(block, preview=text, controls=[
        Control("text", "text", "textarea", text, placeholder="Enter your text content..."),
    ])


def render_image(block: Block) -> BlockView:
    url = _text(block.content, "url")
    return _view(block, preview=url, controls=[
        Control("url", "url", "upload", url),
        Control("alt", "alt", "text", _text(block.content, "alt"), placeholder="Alt text (for accessibility)"),
    ])


def render_quote(block: Block) -> BlockView:
    text = _text(block.content, "text")
    return _view(block, preview=text, controls=[
        Control("text", "text", "textarea", text, placeholder="Enter quote text..."),
        Control("author", "author", "text", _text(block.content, "author"), placeholder="Quote author (optional)"),
    ])


def render_list(block: Block) -> BlockView:
    text = format_list_text(block.content.get("items"))
    return _view(block, preview=text, controls=[
        Control("listType", "listType", "select", _text(block.content, "listType", "bullet"), options=LIST_TYPES),
        Control("items", "items", "textarea", text,
                placeholder="Enter list items (one per line)...", parse=parse_list_text),
    ])


def render_divider(block: Block) -> BlockView:
    return _view(block, preview="Divider")


def render_spacer(block: Block) -> BlockView:
    height = _text(block.content, "height", DEFAULT_SPACER_HEIGHT)
    view = _view(block, preview=f"Spacer ({height})", controls=[
        Control("height", "height", "text", height, placeholder=DEFAULT_SPACER_HEIGHT),
    ])
    view.style = {"height": height, **view.style}
    return view


def render_button(block: Block) -> BlockView:
    text = _text(block.content, "text")
    return _view(block, preview=text or DEFAULT_BUTTON_LABEL, controls=[
        Control("text", "text", "text", text, placeholder="Button text..."),
        Control("url", "url", "url", _text(block.content, "url"), placeholder="Button link (URL)..."),
    ])


def render_unknown(block: Block) -> BlockView:
    """Fail-soft placeholder for a type written by another version of the editor."""
    return BlockView(
        block_id=block.id,
        type=block.type,
        label="Unknown",
        style=dict(block.style or {}),
        preview=f"Unknown block type: {block.type}",
        unknown=True,
    )


RENDERERS: dict[BlockType, Callable[[Block], BlockView]] = {
    BlockType.header:  render_header,
    BlockType.text:    render_text,
    BlockType.image:   render_image,
    BlockType.quote:   render_quote,
    BlockType.list:    render_list,
    BlockType.divider: render_divider,
    BlockType.spacer:  render_spacer,
    BlockType.button:  render_button,
}


def render_block(block: Block) -> BlockView:
    """Dispatch to the renderer for block.type, or the placeholder for unknown types."""
    renderer = RENDERERS.get(block.block_type)
    return renderer(block) if renderer else render_unknown(block)


def edit_patch(block: Block, control_name: str, raw: str) -> dict[str, Any]:
    """Content patch produced by typing raw into the named control of block's view."""
    return render_block(block).control(control_name).to_patch(raw)
