# cosmicbuilder/core/interpreter.py
"""
Action Interpreter

Folds an ordered batch of parsed actions over a starting tree snapshot.
Each action sees the tree produced by the previous one, so a file created
early in a batch can be edited later in the same batch (the new id is
assigned while the create is processed and reported in ``created_ids``).

Individual actions never abort the batch: anything that cannot be applied
is recorded as a "Skipped ..." summary line and the fold continues.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from cosmicbuilder.core import tree_store
from cosmicbuilder.core.actions import (
    Action,
    ActionType,
    ChatAction,
    CreateAction,
    DeleteAction,
    EditAction,
    SkippedAction,
    UNKNOWN_TYPE_REASON,
    batch_modifies_tree,
)
from cosmicbuilder.core.tree_store import FileNode, FolderNode, Node, NodeType, Tree

logger = logging.getLogger(__name__)


class MissingParentPolicy(Enum):
    """Where a create lands when its parentId does not name a folder."""
    ROOT = "root"
    DROP = "drop"


class SideEffectKind(Enum):
    OPEN = "open"
    CLOSE = "close"
    ACTIVATE = "activate"


@dataclass(frozen=True)
class SideEffect:
    """Editor-tab effect of an action. ``node_id`` is None for "no active file"."""
    kind: SideEffectKind
    node_id: Optional[str]


@dataclass
class BatchResult:
    tree: Tree
    summary: List[str] = field(default_factory=list)
    side_effects: List[SideEffect] = field(default_factory=list)
    open_ids: List[str] = field(default_factory=list)
    active_id: Optional[str] = None
    modified: bool = False
    created_ids: List[str] = field(default_factory=list)
    skipped: int = 0


class _Fold:
    """Mutable accumulator for one batch application."""

    def __init__(self, tree: Tree, open_ids: Sequence[str], active_id: Optional[str]):
        self.tree = tree
        self.open_ids = list(open_ids)
        self.active_id = active_id
        self.summary: List[str] = []
        self.side_effects: List[SideEffect] = []
        self.created_ids: List[str] = []
        self.skipped = 0

    def skip(self, line: str) -> None:
        logger.warning(line)
        self.summary.append(line)
        self.skipped += 1

    def open_and_activate(self, node_id: str) -> None:
        if node_id not in self.open_ids:
            self.open_ids.append(node_id)
            self.side_effects.append(SideEffect(SideEffectKind.OPEN, node_id))
        self.active_id = node_id
        self.side_effects.append(SideEffect(SideEffectKind.ACTIVATE, node_id))

    def close(self, node_ids: Sequence[str]) -> None:
        targets = set(node_ids)
        closing = [node_id for node_id in self.open_ids if node_id in targets]
        if not closing:
            return
        self.open_ids = [node_id for node_id in self.open_ids if node_id not in closing]
        for node_id in closing:
            self.side_effects.append(SideEffect(SideEffectKind.CLOSE, node_id))
        if self.active_id in closing:
            self.active_id = self.open_ids[0] if self.open_ids else None
            self.side_effects.append(SideEffect(SideEffectKind.ACTIVATE, self.active_id))


class ActionInterpreter:
    """
    Applies action batches to tree snapshots.

    Args:
        missing_parent: Policy for creates whose parent is missing or a file.
        id_factory: Generates ids for created nodes.
    """

    def __init__(
        self,
        missing_parent: MissingParentPolicy = MissingParentPolicy.ROOT,
        id_factory: Callable[[], str] = tree_store.new_node_id,
    ):
        self.missing_parent = missing_parent
        self.id_factory = id_factory

    def apply(
        self,
        tree: Tree,
        actions: Sequence[Action],
        open_ids: Sequence[str] = (),
        active_id: Optional[str] = None,
    ) -> BatchResult:
        """
        Apply ``actions`` left to right starting from ``tree``.

        ``open_ids`` and ``active_id`` describe the editor tabs before the
        batch; the result carries their updated values. The input tree is
        never modified.
        """
        fold = _Fold(tree, open_ids, active_id)
        for action in actions:
            if isinstance(action, EditAction):
                self._apply_edit(fold, action)
            elif isinstance(action, CreateAction):
                self._apply_create(fold, action)
            elif isinstance(action, DeleteAction):
                self._apply_delete(fold, action)
            elif isinstance(action, ChatAction):
                fold.summary.append(action.message)
            elif isinstance(action, SkippedAction):
                self._record_skipped(fold, action)
            else:
                fold.skip(f"Skipped unsupported action {action!r}.")

        result = BatchResult(
            tree=fold.tree,
            summary=fold.summary,
            side_effects=fold.side_effects,
            open_ids=fold.open_ids,
            active_id=fold.active_id,
            modified=batch_modifies_tree(actions),
            created_ids=fold.created_ids,
            skipped=fold.skipped,
        )
        logger.info(
            f"Applied batch of {len(actions)} actions "
            f"({fold.skipped} skipped, {len(fold.created_ids)} created)"
        )
        return result

    # ------------------------------------------------------------------
    # Per-variant handlers
    # ------------------------------------------------------------------
    def _apply_edit(self, fold: _Fold, action: EditAction) -> None:
        node = tree_store.find_by_id(fold.tree, action.file_id)
        if not isinstance(node, FileNode):
            fold.skip(f"Skipped malformed 'edit' action for file ID {action.file_id}.")
            return
        fold.tree = tree_store.update(fold.tree, action.file_id, action.content)
        fold.summary.append(f"Updated file: {node.name}")
        fold.open_and_activate(action.file_id)

    def _apply_create(self, fold: _Fold, action: CreateAction) -> None:
        parent_id = action.parent_id
        if parent_id is not None:
            parent = tree_store.find_by_id(fold.tree, parent_id)
            if not isinstance(parent, FolderNode):
                if self.missing_parent is MissingParentPolicy.DROP:
                    fold.skip(f"Skipped 'create' action: parent {parent_id} not found.")
                    return
                logger.warning(
                    f"Parent {parent_id} for '{action.name}' not found; creating at root"
                )
                parent_id = None

        node_id = self.id_factory()
        node: Node
        if action.kind is NodeType.FOLDER:
            node = FolderNode(id=node_id, name=action.name)
        else:
            node = FileNode(id=node_id, name=action.name, content=action.content)

        fold.tree = tree_store.insert(fold.tree, parent_id, node)
        fold.created_ids.append(node_id)
        fold.summary.append(f"Created {action.kind.value}: {action.name}")
        if action.kind is NodeType.FILE:
            fold.open_and_activate(node_id)

    def _apply_delete(self, fold: _Fold, action: DeleteAction) -> None:
        node = tree_store.find_by_id(fold.tree, action.file_id)
        if node is None:
            fold.skip(f"Skipped 'delete' action for missing file ID {action.file_id}.")
            return
        fold.tree = tree_store.remove(fold.tree, action.file_id)
        fold.summary.append(f"Deleted {node.type.value}: {node.name}")
        fold.close(tree_store.descendant_ids(node))

    def _record_skipped(self, fold: _Fold, action: SkippedAction) -> None:
        if action.type is ActionType.EDIT:
            fold.skip(f"Skipped malformed 'edit' action for file ID {action.file_id}.")
        elif action.type is None and action.reason == UNKNOWN_TYPE_REASON:
            fold.skip(f"Skipped unknown action type '{action.raw_type}'.")
        elif action.type is None:
            fold.skip(f"Skipped malformed action: {action.reason}.")
        else:
            fold.skip(f"Skipped malformed '{action.type.value}' action: {action.reason}.")
