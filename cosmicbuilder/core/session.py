# cosmicbuilder/core/session.py
"""
Session state owned by the controller: the project tree, the editor tabs
and the chat transcript.

The tree itself is an immutable snapshot; the session only swaps which
snapshot is current. Editor ports (select/close/edit) go through the Tree
Store functions like every other mutation.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from cosmicbuilder.core import tree_store
from cosmicbuilder.core.constants import (
    DEFAULT_ACTIVE_ID,
    DEFAULT_MODEL,
    DEFAULT_OPEN_IDS,
    initial_tree,
)
from cosmicbuilder.core.tree_store import FileNode, Tree

logger = logging.getLogger(__name__)


@dataclass
class ChatMessage:
    """One transcript entry."""
    role: str
    content: str
    model: str = DEFAULT_MODEL
    is_error: bool = False
    is_auto_fix: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        return cls(
            role=str(data.get("role", "assistant")),
            content=str(data.get("content", "")),
            model=str(data.get("model", DEFAULT_MODEL)),
            is_error=data.get("is_error", data.get("isError")) is True,
            is_auto_fix=data.get("is_auto_fix", data.get("isAutoFix")) is True,
        )


@dataclass
class SessionState:
    tree: Tree = field(default_factory=initial_tree)
    active_id: Optional[str] = DEFAULT_ACTIVE_ID
    open_ids: List[str] = field(default_factory=lambda: list(DEFAULT_OPEN_IDS))
    messages: List[ChatMessage] = field(default_factory=list)
    model: str = DEFAULT_MODEL

    # ------------------------------------------------------------------
    # Transcript
    # ------------------------------------------------------------------
    def add_message(self, role: str, content: str, **kwargs) -> ChatMessage:
        message = ChatMessage(role=role, content=content, model=kwargs.pop("model", self.model), **kwargs)
        self.messages.append(message)
        logger.debug(f"Added message: role={role}, content_len={len(content)}")
        return message

    def clear_messages(self) -> None:
        self.messages = []

    # ------------------------------------------------------------------
    # Editor ports
    # ------------------------------------------------------------------
    @property
    def active_file(self) -> Optional[FileNode]:
        if self.active_id is None:
            return None
        node = tree_store.find_by_id(self.tree, self.active_id)
        return node if isinstance(node, FileNode) else None

    def open_files(self, tree: Optional[Tree] = None) -> List[FileNode]:
        """
        Open tabs resolved against ``tree`` (the current tree by default).
        Ids that do not resolve to a file are left out.
        """
        tree = self.tree if tree is None else tree
        files: List[FileNode] = []
        for node_id in self.open_ids:
            node = tree_store.find_by_id(tree, node_id)
            if isinstance(node, FileNode):
                files.append(node)
        return files

    def select_file(self, node_id: str) -> bool:
        """Open ``node_id`` in a tab (if needed) and make it active."""
        if not isinstance(tree_store.find_by_id(self.tree, node_id), FileNode):
            logger.warning(f"select_file: {node_id} is not a file")
            return False
        self.active_id = node_id
        if node_id not in self.open_ids:
            self.open_ids.append(node_id)
        return True

    def close_file(self, node_id: str) -> None:
        """Close a tab; the first remaining tab becomes active."""
        self.open_ids = [open_id for open_id in self.open_ids if open_id != node_id]
        if self.active_id == node_id:
            self.active_id = self.open_ids[0] if self.open_ids else None

    def edit_file(self, node_id: str, content: str) -> None:
        """Manual edit from the editor widget."""
        self.tree = tree_store.update(self.tree, node_id, content)
