"""
Session persistence.

A small JSON key/value file standing in for browser local storage. The
core loads the session once at start and saves it after every state
transition; values are plain data (tree dicts, id lists, message dicts).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from cosmicbuilder.core import tree_store
from cosmicbuilder.core.constants import DEFAULT_ACTIVE_ID, DEFAULT_MODEL, DEFAULT_OPEN_IDS
from cosmicbuilder.core.session import ChatMessage, SessionState

logger = logging.getLogger("CosmicBuilder.SessionStore")

FILES_KEY = "ai-web-builder-files"
ACTIVE_FILE_KEY = "ai-web-builder-active-file"
OPEN_FILES_KEY = "ai-web-builder-open-files"
MESSAGES_KEY = "ai-web-builder-messages"
MODEL_KEY = "selectedAiModel"


@dataclass
class SessionStore:
    """
    Key/value store persisted as one JSON object.

    Unreadable or corrupt files are treated as empty, so a damaged store
    falls back to the starter session instead of failing startup.
    """

    path: Path = field(default_factory=lambda: Path.home() / ".cosmicbuilder" / "session.json")

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self._data: Dict[str, Any] = {}
        self._loaded: bool = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _load(self) -> None:
        if self._loaded:
            return
        self._loaded = True

        if not self.path.exists():
            self._data = {}
            return

        try:
            obj = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"SessionStore: failed to load {self.path}: {e}")
            self._data = {}
            return
        self._data = obj if isinstance(obj, dict) else {}

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"SessionStore: failed to save {self.path}: {e}")

    # ------------------------------------------------------------------
    # Key/value API
    # ------------------------------------------------------------------
    def get(self, key: str, default: Optional[Any] = None) -> Any:
        self._load()
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._load()
        self._data[key] = value
        self._save()

    def forget(self, key: str) -> None:
        self._load()
        if key not in self._data:
            return
        self._data.pop(key, None)
        self._save()

    # ------------------------------------------------------------------
    # Session API
    # ------------------------------------------------------------------
    def load_session(self) -> SessionState:
        """Session from the store; missing or invalid values fall back to the starter ones."""
        state = SessionState()

        raw_tree = self.get(FILES_KEY)
        if raw_tree is not None:
            try:
                state.tree = tree_store.tree_from_dict(raw_tree)
            except ValueError as e:
                logger.warning(f"SessionStore: stored tree is invalid, using starter project: {e}")

        active_id = self.get(ACTIVE_FILE_KEY, DEFAULT_ACTIVE_ID)
        state.active_id = active_id if isinstance(active_id, str) else None

        open_ids = self.get(OPEN_FILES_KEY, list(DEFAULT_OPEN_IDS))
        if isinstance(open_ids, list):
            state.open_ids = [i for i in open_ids if isinstance(i, str)]

        messages = self.get(MESSAGES_KEY, [])
        if isinstance(messages, list):
            state.messages = [ChatMessage.from_dict(m) for m in messages if isinstance(m, dict)]

        model = self.get(MODEL_KEY, DEFAULT_MODEL)
        state.model = model if isinstance(model, str) else DEFAULT_MODEL
        return state

    def save_session(self, state: SessionState) -> None:
        self._load()
        self._data.update({
            FILES_KEY: tree_store.tree_to_dict(state.tree),
            ACTIVE_FILE_KEY: state.active_id,
            OPEN_FILES_KEY: list(state.open_ids),
            MESSAGES_KEY: [m.to_dict() for m in state.messages],
            MODEL_KEY: state.model,
        })
        self._save()
        logger.debug(f"Session saved to {self.path}")

    def reset(self) -> SessionState:
        """Drop the stored session and return a fresh starter one."""
        self._load()
        for key in (FILES_KEY, ACTIVE_FILE_KEY, OPEN_FILES_KEY, MESSAGES_KEY):
            self._data.pop(key, None)
        self._save()
        model = self._data.get(MODEL_KEY, DEFAULT_MODEL)
        return SessionState(model=model if isinstance(model, str) else DEFAULT_MODEL)
