# cosmicbuilder/ui/transcript.py
"""
Plain-text rendering of chat messages and the project tree.
"""

from typing import Optional, Sequence

from cosmicbuilder.core import tree_store
from cosmicbuilder.core.session import ChatMessage
from cosmicbuilder.core.tree_store import NodeType, Tree
from cosmicbuilder.ui.colors import (
    CHAT_LABEL_AI,
    CHAT_LABEL_ERROR,
    CHAT_LABEL_FIX,
    CHAT_LABEL_USER,
    MUTED_FG,
    colorize,
)


def format_message(message: ChatMessage, color: bool = True) -> str:
    if message.role == "user":
        label, style = "you", CHAT_LABEL_USER
    elif message.is_error:
        label, style = f"{message.model} (error)", CHAT_LABEL_ERROR
    elif message.is_auto_fix:
        label, style = f"{message.model} (auto-fix)", CHAT_LABEL_FIX
    else:
        label, style = message.model, CHAT_LABEL_AI
    if not color:
        return f"[{label}] {message.content}"
    return f"{colorize(f'[{label}]', style)} {message.content}"


def format_tree(
    tree: Tree,
    open_ids: Sequence[str] = (),
    active_id: Optional[str] = None,
    color: bool = True,
) -> str:
    """One line per node: marker, path, id. ``*`` active, ``+`` open."""
    lines = []
    for flat in tree_store.flatten(tree):
        marker = " "
        if flat.id == active_id:
            marker = "*"
        elif flat.id in open_ids:
            marker = "+"
        suffix = f"(id: {flat.id})"
        if color:
            suffix = colorize(suffix, MUTED_FG)
        if flat.type is NodeType.FOLDER:
            marker = " "
        lines.append(f"{marker} {flat.path}  {suffix}")
    return "\n".join(lines)
