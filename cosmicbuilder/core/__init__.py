# Core modules
from .tree_store import FileNode, FolderNode, FlatNode, NodeType
from .actions import (
    ActionType,
    EditAction,
    CreateAction,
    DeleteAction,
    ChatAction,
    SkippedAction,
)
from .interpreter import ActionInterpreter, BatchResult, MissingParentPolicy
from .correction_engine import CorrectionEngine, CorrectionContext, EngineState
from .session import ChatMessage, SessionState

__all__ = [
    "FileNode",
    "FolderNode",
    "FlatNode",
    "NodeType",
    "ActionType",
    "EditAction",
    "CreateAction",
    "DeleteAction",
    "ChatAction",
    "SkippedAction",
    "ActionInterpreter",
    "BatchResult",
    "MissingParentPolicy",
    "CorrectionEngine",
    "CorrectionContext",
    "EngineState",
    "ChatMessage",
    "SessionState",
]
