"""Document editor canvas: owns one document's ordered block list and the style selection"""

from typing import Any, Callable, Iterable

import structlog

from blockpub.core.models import (
    Block, BlockType, apply_content_patch, blocks_from_records, blocks_to_records, new_block,
)
from blockpub.core.renderers import BlockView, edit_patch, render_block
from blockpub.core.style_panel import StylePanel


logger = structlog.get_logger()


def renumber(blocks: Iterable[Block]) -> list[Block]:
    """Assign order = index to an already-sequenced list, copying only blocks whose order changes."""
    return [b if b.order == i else b.model_copy(update={"order": i}) for i, b in enumerate(blocks)]


def move(blocks: list[Block], from_index: int, to_index: int) -> list[Block]:
    """Return a copy of blocks with the item at from_index moved to to_index."""
    out = list(blocks)
    out.insert(to_index, out.pop(from_index))
    return out


class DocumentEditor:
    """Canonical block list for one document plus single-block style selection.

    Every structural change (add, reorder, delete) leaves orders at exactly
    0..N-1. Loaded blocks with gaps or duplicate orders are renumbered up
    front (stable by order) without notifying on_change. Stale ids are
    ignored rather than raised, since drag gestures and uploads can report
    ids that are no longer in the list. on_change receives the new list after
    each effective mutation.
    """

    def __init__(
        self,
        blocks: Iterable[Block] | None = None,
        on_change: Callable[[list[Block]], Any] | None = None,
        document_id: str | None = None,
        ):
        self.document_id = document_id
        self._blocks: list[Block] = renumber(sorted(blocks or [], key=lambda b: b.order))
        self._on_change = on_change
        self.selected_block_id: str | None = None
        self.style_editor_open = False
        self._panel: StylePanel | None = None

    @classmethod
    def from_records(cls, records: list[dict] | None, **kwargs) -> "DocumentEditor":
        return cls(blocks_from_records(records), **kwargs)

    # --- reads ---

    @property
    def blocks(self) -> list[Block]:
        return list(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def get(self, block_id: str) -> Block | None:
        return next((b for b in self._blocks if b.id == block_id), None)

    def ordered_blocks(self) -> list[Block]:
        """Blocks in render order, recomputed from each block's order field."""
        return sorted(self._blocks, key=lambda b: b.order)

    def render(self) -> list[BlockView]:
        return [render_block(b) for b in self.ordered_blocks()]

    def to_records(self) -> list[dict]:
        return blocks_to_records(self._blocks)

    @property
    def selected_block(self) -> Block | None:
        return self.get(self.selected_block_id) if self.selected_block_id else None

    @property
    def style_panel(self) -> StylePanel | None:
        """The open style panel, or None when closed or its block is gone."""
        if self.style_editor_open and self.selected_block is not None:
            return self._panel
        return None

    # --- mutations ---

    def _commit(self, blocks: list[Block]) -> None:
        self._blocks = blocks
        if self._on_change:
            self._on_change(list(blocks))

    def add_block(self, block_type: BlockType | str) -> Block:
        """Append a block with default content at order = current length."""
        block = new_block(block_type, order=len(self._blocks))
        self._commit(self._blocks + [block])
        logger.info("block_added", document_id=self.document_id, block_id=block.id, type=block.type)
        return block

    def reorder(self, from_id: str, to_id: str) -> bool:
        """Move from_id to the position held by to_id and renumber every block."""
        if from_id == to_id:
            return False
        ordered = self.ordered_blocks()
        ids = [b.id for b in ordered]
        if from_id not in ids or to_id not in ids:
            logger.debug("reorder_stale_id", document_id=self.document_id, from_id=from_id, to_id=to_id)
            return False
        self._commit(renumber(move(ordered, ids.index(from_id), ids.index(to_id))))
        logger.info("block_moved", document_id=self.document_id, block_id=from_id, to_id=to_id)
        return True

    def delete(self, block_id: str) -> bool:
        """Remove block_id, close the gap in orders, and drop its selection."""
        if self.get(block_id) is None:
            logger.debug("delete_stale_id", document_id=self.document_id, block_id=block_id)
            return False
        self._commit(renumber(b for b in self.ordered_blocks() if b.id != block_id))
        if self.selected_block_id == block_id:
            self.close_style_editor()
        logger.info("block_deleted", document_id=self.document_id, block_id=block_id)
        return True

    def update(self, block: Block) -> bool:
        """Replace the block with the same id; all other blocks and orders are untouched."""
        if self.get(block.id) is None:
            logger.debug("update_stale_id", document_id=self.document_id, block_id=block.id)
            return False
        self._commit([block if b.id == block.id else b for b in self._blocks])
        return True

    def patch_content(self, block_id: str, patch: dict[str, Any]) -> bool:
        block = self.get(block_id)
        if block is None:
            return False
        return self.update(apply_content_patch(block, patch))

    def edit(self, block_id: str, control: str, raw: str) -> bool:
        """Apply raw input typed into a control of the block's rendered view."""
        block = self.get(block_id)
        if block is None:
            return False
        return self.update(apply_content_patch(block, edit_patch(block, control, raw)))

    # --- style selection ---

    def open_style_editor(self, block_id: str) -> StylePanel | None:
        """Select block_id for style editing, replacing any prior selection."""
        if self.get(block_id) is None:
            return None
        self.selected_block_id = block_id
        self.style_editor_open = True
        self._panel = StylePanel(
            source=lambda: self.get(block_id),
            on_update=self.update,
            on_close=self.close_style_editor,
        )
        return self._panel

    def close_style_editor(self) -> None:
        self.style_editor_open = False
        self.selected_block_id = None
        self._panel = None
