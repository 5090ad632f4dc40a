# cosmicbuilder/core/actions.py
"""
Action protocol.

Model replies carry loosely typed action objects. They are parsed here into
one dataclass per action kind. A payload that is malformed for its kind, or
whose kind is unknown, becomes a ``SkippedAction`` carrying the reason, so
the rest of the batch can still be applied.

Wire format (one object per action)::

    {"type": "edit",   "fileId": "...", "content": "..."}
    {"type": "create", "parentId": "..." | null, "fileType": "file" | "folder",
                       "name": "...", "content": "..."}
    {"type": "delete", "fileId": "..."}
    {"type": "chat",   "message": "..."}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from cosmicbuilder.core.errors import MalformedReplyError
from cosmicbuilder.core.tree_store import NodeType

logger = logging.getLogger(__name__)


class ActionType(Enum):
    EDIT = "edit"
    CREATE = "create"
    DELETE = "delete"
    CHAT = "chat"


TREE_MUTATING_TYPES = frozenset({ActionType.EDIT, ActionType.CREATE, ActionType.DELETE})

UNKNOWN_TYPE_REASON = "unknown action type"


@dataclass(frozen=True)
class EditAction:
    file_id: str
    content: str

    @property
    def type(self) -> ActionType:
        return ActionType.EDIT


@dataclass(frozen=True)
class CreateAction:
    parent_id: Optional[str]
    name: str
    kind: NodeType
    content: str = ""

    @property
    def type(self) -> ActionType:
        return ActionType.CREATE


@dataclass(frozen=True)
class DeleteAction:
    file_id: str

    @property
    def type(self) -> ActionType:
        return ActionType.DELETE


@dataclass(frozen=True)
class ChatAction:
    message: str

    @property
    def type(self) -> ActionType:
        return ActionType.CHAT


@dataclass(frozen=True)
class SkippedAction:
    """
    An action that could not be parsed.

    ``type`` is the recognised kind, or None when the kind is unknown.
    ``raw_type`` is whatever the model sent.
    """
    reason: str
    raw_type: str = ""
    type: Optional[ActionType] = None
    file_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)


Action = Union[EditAction, CreateAction, DeleteAction, ChatAction, SkippedAction]


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------

def normalize_action_type(raw_type: Any) -> Optional[ActionType]:
    """
    Normalize "edit", "Edit", "EDIT", "edit_file", "create-file" ... to
    an ActionType. Returns None for anything unrecognised.
    """
    if not isinstance(raw_type, str):
        return None

    cleaned = raw_type.replace("-", "").replace("_", "").replace(" ", "").lower()
    for action_type in ActionType:
        if cleaned == action_type.value:
            return action_type

    # Aliases seen from models that echo tool-style names
    if cleaned in {"editfile", "updatefile", "rewritefile"}:
        return ActionType.EDIT
    if cleaned in {"createfile", "createfolder"}:
        return ActionType.CREATE
    if cleaned in {"deletefile", "deletefolder", "remove"}:
        return ActionType.DELETE
    if cleaned in {"message", "reply"}:
        return ActionType.CHAT
    return None


def _skip(
    reason: str,
    raw: Dict[str, Any],
    action_type: Optional[ActionType] = None,
) -> SkippedAction:
    raw_type = raw.get("type")
    file_id = raw.get("fileId")
    return SkippedAction(
        reason=reason,
        raw_type=raw_type if isinstance(raw_type, str) else repr(raw_type),
        type=action_type,
        file_id=file_id if isinstance(file_id, str) else None,
        raw=raw,
    )


def _parse_parent_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value
    raise ValueError(f"invalid parentId {value!r}")


def parse_action(raw: Any) -> Action:
    """
    Parse one wire-format action. Never raises.
    """
    if not isinstance(raw, dict):
        return SkippedAction(
            reason=f"expected an object, got {type(raw).__name__}",
            raw_type=type(raw).__name__,
        )

    action_type = normalize_action_type(raw.get("type"))
    if action_type is None:
        return _skip(UNKNOWN_TYPE_REASON, raw)

    if action_type is ActionType.EDIT:
        file_id = raw.get("fileId")
        content = raw.get("content")
        if not isinstance(file_id, str) or not isinstance(content, str):
            return _skip("requires string 'fileId' and 'content'", raw, action_type)
        return EditAction(file_id=file_id, content=content)

    if action_type is ActionType.CREATE:
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            return _skip("requires a non-empty 'name'", raw, action_type)
        try:
            kind = NodeType(str(raw.get("fileType", "")).lower())
        except ValueError:
            return _skip("'fileType' must be 'file' or 'folder'", raw, action_type)
        try:
            parent_id = _parse_parent_id(raw.get("parentId"))
        except ValueError as e:
            return _skip(str(e), raw, action_type)
        content = raw.get("content")
        if content is None:
            content = ""
        if not isinstance(content, str):
            return _skip("'content' must be a string", raw, action_type)
        if kind is NodeType.FOLDER:
            content = ""
        return CreateAction(parent_id=parent_id, name=name, kind=kind, content=content)

    if action_type is ActionType.DELETE:
        file_id = raw.get("fileId")
        if not isinstance(file_id, str):
            return _skip("requires string 'fileId'", raw, action_type)
        return DeleteAction(file_id=file_id)

    message = raw.get("message")
    if not isinstance(message, str):
        return _skip("requires string 'message'", raw, action_type)
    return ChatAction(message=message)


def parse_batch(payload: Any) -> List[Action]:
    """
    Parse the ``actions`` sequence of a model reply.

    Accepts either the whole reply object ``{"actions": [...]}`` or the list
    itself. Individual malformed actions are kept as SkippedAction.

    Raises:
        MalformedReplyError: If there is no action list at all.
    """
    if isinstance(payload, dict):
        if "actions" not in payload:
            raise MalformedReplyError("AI returned an invalid action format: missing 'actions' key.")
        payload = payload["actions"]
    if not isinstance(payload, list):
        raise MalformedReplyError("AI returned an invalid action format: 'actions' is not a list.")

    actions = [parse_action(item) for item in payload]
    skipped = sum(1 for action in actions if isinstance(action, SkippedAction))
    logger.debug(f"Parsed batch: {len(actions)} actions, {skipped} skipped")
    return actions


def batch_modifies_tree(actions: Sequence[Action]) -> bool:
    """True when the batch contains at least one edit, create or delete."""
    return any(action.type in TREE_MUTATING_TYPES for action in actions)


def action_to_dict(action: Action) -> Dict[str, Any]:
    """Wire-format form of an action, used when echoing a batch back to the model."""
    if isinstance(action, EditAction):
        return {"type": "edit", "fileId": action.file_id, "content": action.content}
    if isinstance(action, CreateAction):
        data: Dict[str, Any] = {
            "type": "create",
            "parentId": action.parent_id,
            "fileType": action.kind.value,
            "name": action.name,
        }
        if action.kind is NodeType.FILE:
            data["content"] = action.content
        return data
    if isinstance(action, DeleteAction):
        return {"type": "delete", "fileId": action.file_id}
    if isinstance(action, ChatAction):
        return {"type": "chat", "message": action.message}
    return dict(action.raw)
