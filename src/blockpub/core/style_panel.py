"""Style override panel: grouped style controls for one block, pushed live on every change"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

import structlog

from blockpub.core.models import Block, apply_style_patch


logger = structlog.get_logger()


class StyleTab(str, Enum):
    typography = "typography"
    colors = "colors"
    spacing = "spacing"


FONT_SIZES = [
    ("12px", "Extra Small"),
    ("14px", "Small"),
    ("16px", "Normal"),
    ("18px", "Large"),
    ("20px", "Extra Large"),
    ("24px", "Huge"),
    ("32px", "Giant"),
]

FONT_WEIGHTS = [
    ("300", "Light"),
    ("400", "Normal"),
    ("500", "Medium"),
    ("600", "Semibold"),
    ("700", "Bold"),
    ("800", "Extra Bold"),
]

TEXT_ALIGNMENTS = [("left", "Left"), ("center", "Center"), ("right", "Right")]

COMMON_COLORS = [
    "#000000", "#374151", "#6B7280", "#9CA3AF",
    "#EF4444", "#F97316", "#EAB308", "#22C55E",
    "#3B82F6", "#8B5CF6", "#EC4899", "#F43F5E",
]

SPACING_OPTIONS = [
    ("0px", "None"),
    ("4px", "XS"),
    ("8px", "SM"),
    ("16px", "MD"),
    ("24px", "LG"),
    ("32px", "XL"),
    ("48px", "2XL"),
]

BORDER_RADIUS_OPTIONS = [
    ("0px", "None"),
    ("4px", "Small"),
    ("8px", "Medium"),
    ("12px", "Large"),
    ("16px", "XL"),
    ("9999px", "Full"),
]

TRANSPARENT = "transparent"

STYLE_DEFAULTS: dict[str, str] = {
    "fontSize":        "16px",
    "fontWeight":      "400",
    "textAlign":       "left",
    "color":           "#000000",
    "backgroundColor": TRANSPARENT,
    "margin":          "0px",
    "padding":         "0px",
    "borderRadius":    "0px",
}

PICKER_DEFAULTS = {"color": "#000000", "backgroundColor": "#ffffff"}

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


@dataclass
class StyleControl:
    """One control in the active tab, seeded from the block's current style."""
    field:   str
    label:   str
    kind:    str                                    # select | align | color
    value:   str
    options: list[tuple[str, str]] = field(default_factory=list)
    swatches: list[str] = field(default_factory=list)
    picker:  Optional[str] = None                   # free-form colour picker seed


_LADDERS: dict[str, list[tuple[str, str]]] = {
    "fontSize":     FONT_SIZES,
    "fontWeight":   FONT_WEIGHTS,
    "textAlign":    TEXT_ALIGNMENTS,
    "margin":       SPACING_OPTIONS,
    "padding":      SPACING_OPTIONS,
    "borderRadius": BORDER_RADIUS_OPTIONS,
}

TAB_FIELDS: dict[StyleTab, tuple[str, ...]] = {
    StyleTab.typography: ("fontSize", "fontWeight", "textAlign"),
    StyleTab.colors:     ("color", "backgroundColor"),
    StyleTab.spacing:    ("margin", "padding", "borderRadius"),
}


_LABELS = {
    "fontSize":        "Font Size",
    "fontWeight":      "Font Weight",
    "textAlign":       "Text Alignment",
    "color":           "Text Color",
    "backgroundColor": "Background Color",
    "margin":          "Margin",
    "padding":         "Padding",
    "borderRadius":    "Border Radius",
}


def validate_style_value(field_name: str, value: str) -> str:
    """Return value if it is allowed for field_name; raise ValueError otherwise."""
    if field_name in _LADDERS:
        allowed = [v for v, _ in _LADDERS[field_name]]
        if value not in allowed:
            raise ValueError(f"{field_name} must be one of {', '.join(allowed)}; got {value!r}")
        return value
    if field_name in ("color", "backgroundColor"):
        if field_name == "backgroundColor" and value == TRANSPARENT:
            return value
        if value in COMMON_COLORS or HEX_COLOR_RE.match(value):
            return value
        raise ValueError(f"{field_name} must be a swatch or #rrggbb colour; got {value!r}")
    raise ValueError(f"Unknown style field: {field_name}")


class StylePanel:
    """Grouped style editor for the block returned by source().

    The panel keeps only the active tab. The block is read from source on
    every access and every change is pushed through on_update as a fully
    merged block, so there is nothing to commit on close. Once the block is
    gone from the source, changes are ignored and controls show defaults.
    """

    def __init__(
        self,
        source: Callable[[], Optional[Block]],
        on_update: Callable[[Block], Any],
        on_close: Callable[[], Any] | None = None,
        ):
        self._source = source
        self._on_update = on_update
        self._on_close = on_close
        self.active_tab = StyleTab.typography

    @property
    def block(self) -> Optional[Block]:
        return self._source()

    def select_tab(self, tab: StyleTab | str) -> None:
        self.active_tab = StyleTab(tab)

    def _style(self) -> dict[str, Any]:
        block = self.block
        return (block.style or {}) if block is not None else {}

    def value(self, field_name: str) -> str:
        """Current style value for field_name, or its documented default when unset."""
        return self._style().get(field_name) or STYLE_DEFAULTS[field_name]

    def controls(self) -> list[StyleControl]:
        """Controls for the active tab, each seeded from the live block style."""
        style = self._style()
        out = []
        for name in TAB_FIELDS[self.active_tab]:
            if name in ("color", "backgroundColor"):
                current = style.get(name)
                swatches = ([TRANSPARENT] if name == "backgroundColor" else []) + COMMON_COLORS
                picker = current if current and current != TRANSPARENT else PICKER_DEFAULTS[name]
                out.append(StyleControl(name, _LABELS[name], "color", self.value(name),
                                        swatches=swatches, picker=picker))
            else:
                kind = "align" if name == "textAlign" else "select"
                out.append(StyleControl(name, _LABELS[name], kind, self.value(name), options=_LADDERS[name]))
        return out

    def update_style(self, patch: dict[str, str]) -> Optional[Block]:
        """Validate patch, merge it into the block's style, and push the merged block."""
        for name, value in patch.items():
            validate_style_value(name, value)
        block = self.block
        if block is None:
            logger.debug("style_stale_block", patch=patch)
            return None
        updated = apply_style_patch(block, patch)
        logger.debug("style_updated", block_id=updated.id, patch=patch)
        self._on_update(updated)
        return updated

    def set_font_size(self, value: str) -> Optional[Block]:
        return self.update_style({"fontSize": value})

    def set_font_weight(self, value: str) -> Optional[Block]:
        return self.update_style({"fontWeight": value})

    def set_text_align(self, value: str) -> Optional[Block]:
        return self.update_style({"textAlign": value})

    def set_color(self, value: str) -> Optional[Block]:
        return self.update_style({"color": value})

    def set_background(self, value: str) -> Optional[Block]:
        return self.update_style({"backgroundColor": value})

    def set_margin(self, value: str) -> Optional[Block]:
        return self.update_style({"margin": value})

    def set_padding(self, value: str) -> Optional[Block]:
        return self.update_style({"padding": value})

    def set_border_radius(self, value: str) -> Optional[Block]:
        return self.update_style({"borderRadius": value})

    def reset(self) -> Optional[Block]:
        """Replace the entire style map with an empty one, regardless of the active tab."""
        block = self.block
        if block is None:
            logger.debug("style_stale_block", action="reset")
            return None
        updated = block.model_copy(update={"style": {}})
        logger.info("style_reset", block_id=updated.id)
        self._on_update(updated)
        return updated

    def apply(self) -> None:
        """Close the panel; every change has already been pushed."""
        self.close()

    def close(self) -> None:
        if self._on_close:
            self._on_close()
