"""Unit tests for core/style_panel.py"""

import pytest

from blockpub.core.models import Block
from blockpub.core.style_panel import STYLE_DEFAULTS, StylePanel, StyleTab, validate_style_value


def _panel(block: Block):
    """Standalone panel over a fixed block, recording pushed updates."""
    pushed, closed = [], []
    panel = StylePanel(lambda: block, on_update=pushed.append, on_close=lambda: closed.append(True))
    return panel, pushed, closed


def test_default_tab_is_typography(styled_block):
    panel, _, _ = _panel(styled_block)
    assert panel.active_tab == StyleTab.typography
    assert [c.field for c in panel.controls()] == ["fontSize", "fontWeight", "textAlign"]


@pytest.mark.parametrize("tab,fields", [
    ("colors", ["color", "backgroundColor"]),
    ("spacing", ["margin", "padding", "borderRadius"]),
])
def test_select_tab(styled_block, tab, fields):
    panel, _, _ = _panel(styled_block)
    panel.select_tab(tab)
    assert [c.field for c in panel.controls()] == fields


def test_controls_seeded_from_style(styled_block):
    """Controls show the block's current value, or the documented default."""
    panel, _, _ = _panel(styled_block)
    values = {c.field: c.value for c in panel.controls()}
    assert values == {"fontSize": "24px", "fontWeight": "400", "textAlign": "left"}


def test_update_pushes_fully_merged_block(styled_block):
    """Each change pushes the whole block with the patch merged into its style."""
    panel, pushed, _ = _panel(styled_block)
    panel.set_font_weight("700")
    assert len(pushed) == 1
    assert pushed[0].id == styled_block.id
    assert pushed[0].content == styled_block.content
    assert pushed[0].style == {"fontSize": "24px", "color": "#ff0000", "fontWeight": "700"}


def test_style_patch_idempotent(styled_block):
    """Applying the same style patch twice leaves the same state as once."""
    block = styled_block
    panel = StylePanel(lambda: block, on_update=lambda b: None)
    once = panel.set_margin("16px")
    block = once
    twice = panel.set_margin("16px")
    assert once == twice


@pytest.mark.parametrize("field,value", [
    ("fontSize", "15px"),
    ("fontWeight", "900"),
    ("textAlign", "justify"),
    ("margin", "5px"),
    ("borderRadius", "50%"),
    ("color", "red"),
    ("color", "transparent"),
    ("backgroundColor", "#12345"),
])
def test_off_ladder_values_rejected(styled_block, field, value):
    """Values outside the fixed ladders raise and push nothing."""
    panel, pushed, _ = _panel(styled_block)
    with pytest.raises(ValueError):
        panel.update_style({field: value})
    assert pushed == []


def test_free_form_picker_colour_accepted():
    assert validate_style_value("color", "#a1b2c3") == "#a1b2c3"


def test_background_transparent_sentinel(styled_block):
    """transparent is stored explicitly, distinct from unset."""
    panel, pushed, _ = _panel(styled_block)
    panel.set_background("transparent")
    assert pushed[0].style["backgroundColor"] == "transparent"


def test_colour_controls_picker_seed():
    """The background picker seeds white when unset or transparent."""
    block = Block(id="b", type="text", content={}, style={"backgroundColor": "transparent"}, order=0)
    panel, _, _ = _panel(block)
    panel.select_tab(StyleTab.colors)
    text, background = panel.controls()
    assert text.picker == "#000000"
    assert background.picker == "#ffffff"
    assert background.swatches[0] == "transparent"


def test_reset_clears_entire_style(styled_block):
    """Reset replaces the whole style map with {}, regardless of the active tab."""
    panel, pushed, _ = _panel(styled_block)
    panel.select_tab(StyleTab.spacing)
    panel.reset()
    assert pushed[-1].style == {}


def test_reset_then_render_uses_defaults(styled_block):
    """After reset the panel reads documented defaults without error."""
    block = styled_block
    panel = StylePanel(lambda: block, on_update=lambda b: None)
    block = panel.reset()
    assert panel.value("fontSize") == "16px"
    assert panel.value("color") == STYLE_DEFAULTS["color"] == "#000000"


def test_apply_only_closes(styled_block):
    """Apply performs no mutation; it just closes the panel."""
    panel, pushed, closed = _panel(styled_block)
    panel.apply()
    assert pushed == []
    assert closed == [True]


def test_panel_without_style_field():
    """A block with no style field renders defaults and accepts patches."""
    block = Block(id="n", type="header", content={}, order=0)
    panel, pushed, _ = _panel(block)
    assert panel.value("padding") == "0px"
    panel.set_padding("8px")
    assert pushed[0].style == {"padding": "8px"}


def test_panel_with_missing_block_is_noop():
    """When the source no longer yields a block, setters and reset push nothing."""
    pushed = []
    panel = StylePanel(lambda: None, on_update=pushed.append)
    assert panel.set_margin("8px") is None
    assert panel.reset() is None
    assert pushed == []


def test_panel_with_missing_block_still_validates():
    panel = StylePanel(lambda: None, on_update=lambda b: None)
    with pytest.raises(ValueError):
        panel.set_margin("5px")
