# cosmicbuilder/core/correction_engine.py
"""
Correction Engine

Drives the request -> apply -> preview -> (single) auto-fix cycle.

States::

    IDLE --prompt--> AWAITING_MODEL --reply--> APPLYING --modifies tree--> ARMED_FOR_AUTO_FIX
                                                        --chat only------> IDLE
    ARMED_FOR_AUTO_FIX --preview error--> AWAITING_MODEL (fix) --> APPLYING --> IDLE

Only one model call is ever in flight. Preview errors that arrive while a
call is in flight, or when nothing is armed, are dropped rather than
queued. A fix batch never re-arms, so each user request gets at most one
automatic retry. A new user prompt discards any pending correction context.

Every failure (missing key, backend error, malformed reply) is turned into
a transcript entry; nothing escapes ``submit_prompt`` or
``report_preview_error``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional, Tuple, Union

from cosmicbuilder.core import tree_store
from cosmicbuilder.core.actions import Action
from cosmicbuilder.core.errors import CosmicBuilderError, MalformedReplyError
from cosmicbuilder.core.interpreter import ActionInterpreter, BatchResult
from cosmicbuilder.core.preview import PreviewError, build_preview_html
from cosmicbuilder.core.prompt_builder import build_fix_prompt, build_user_prompt
from cosmicbuilder.core.response_parser import ReplyNormalizer
from cosmicbuilder.core.session import SessionState
from cosmicbuilder.core.tree_store import Tree

if TYPE_CHECKING:
    from cosmicbuilder.services.session_store import SessionStore

logger = logging.getLogger(__name__)

# (prompt, model name) -> reply text
CompleteFn = Callable[[str, str], Awaitable[str]]

NO_CHANGES_MESSAGE = "I didn't make any changes. What would you like to do next?"


class EngineState(Enum):
    IDLE = "idle"
    AWAITING_MODEL = "awaiting_model"
    APPLYING = "applying"
    ARMED_FOR_AUTO_FIX = "armed_for_auto_fix"


@dataclass(frozen=True)
class CorrectionContext:
    """
    What an auto-fix needs: the request, the batch it produced, and the
    tree that batch was applied to. ``revision`` identifies the tree state
    the batch produced, so errors from older previews can be told apart.
    """
    original_prompt: str
    applied_batch: Tuple[Action, ...]
    pre_failure_tree: Tree
    revision: int


@dataclass(frozen=True)
class PreviewSnapshot:
    html: str
    revision: int


class CorrectionEngine:
    """
    Owns the session's state machine.

    Args:
        session: Session state to mutate.
        complete: Coroutine function returning the model's reply text.
        interpreter: Batch interpreter (default policy if omitted).
        store: Persists the session after each transition when given.
        preview_root: Folder holding index.html for preview rendering.
    """

    def __init__(
        self,
        session: SessionState,
        complete: CompleteFn,
        interpreter: Optional[ActionInterpreter] = None,
        store: Optional[SessionStore] = None,
        preview_root: Optional[str] = None,
    ):
        self.session = session
        self._complete = complete
        self.interpreter = interpreter or ActionInterpreter()
        self.store = store
        self.preview_root = preview_root
        self.normalizer = ReplyNormalizer()

        self._state = EngineState.IDLE
        self._context: Optional[CorrectionContext] = None
        self._revision = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def context(self) -> Optional[CorrectionContext]:
        return self._context

    @property
    def is_loading(self) -> bool:
        return self._state in (EngineState.AWAITING_MODEL, EngineState.APPLYING)

    @property
    def revision(self) -> int:
        """Bumped every time a batch replaces the session tree."""
        return self._revision

    def render_preview(self) -> PreviewSnapshot:
        """Preview markup for the current tree, tagged with its revision."""
        if self.preview_root:
            html = build_preview_html(self.session.tree, self.preview_root)
        else:
            html = build_preview_html(self.session.tree)
        return PreviewSnapshot(html=html, revision=self._revision)

    def reset_session(self, session: SessionState) -> None:
        """Swap in a new session; any pending correction is discarded."""
        self.session = session
        self._context = None
        self._state = EngineState.IDLE
        self._persist()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    async def submit_prompt(self, text: str) -> Optional[BatchResult]:
        """
        Handle a new user request.

        Returns the applied batch result, or None when the prompt was
        rejected (a call is already in flight) or the call failed.
        """
        if self._context is not None:
            logger.info("New user prompt: discarding pending correction context")
            self._context = None

        if self.is_loading:
            logger.warning("Prompt rejected: a model request is already in flight")
            return None

        session = self.session
        self._state = EngineState.AWAITING_MODEL
        session.add_message("user", text)
        self._persist()

        prompt = build_user_prompt(text, session.tree, session.open_ids)
        actions = await self._request(prompt, error_prefix="Error")
        if actions is None:
            return None

        self._state = EngineState.APPLYING
        pre_tree = session.tree
        result = self.interpreter.apply(pre_tree, actions, session.open_ids, session.active_id)
        self._commit(result)

        if result.summary:
            session.add_message("assistant", "\n".join(result.summary))
        elif not result.modified:
            session.add_message("assistant", NO_CHANGES_MESSAGE)

        if result.modified:
            self._context = CorrectionContext(
                original_prompt=text,
                applied_batch=tuple(actions),
                pre_failure_tree=pre_tree,
                revision=self._revision,
            )
            self._state = EngineState.ARMED_FOR_AUTO_FIX
            logger.info(f"Armed for auto-fix at revision {self._revision}")
        else:
            self._state = EngineState.IDLE

        self._persist()
        return result

    async def report_preview_error(
        self,
        error: Union[str, PreviewError],
        revision: Optional[int] = None,
    ) -> Optional[BatchResult]:
        """
        Handle a runtime error reported by the preview.

        ``revision`` is the revision of the preview that failed (see
        ``render_preview``); errors from an older revision than the armed
        batch are dropped. Returns the applied fix, or None when the
        signal was dropped or the fix attempt failed.
        """
        error_text = error.describe() if isinstance(error, PreviewError) else str(error)

        if self.is_loading:
            logger.debug(f"Preview error dropped, request in flight: {error_text}")
            return None
        context = self._context
        if self._state is not EngineState.ARMED_FOR_AUTO_FIX or context is None:
            logger.debug(f"Preview error dropped, nothing armed: {error_text}")
            return None
        if revision is not None and revision != context.revision:
            logger.info(
                f"Preview error dropped, stale revision {revision} (armed {context.revision})"
            )
            return None

        session = self.session
        self._state = EngineState.AWAITING_MODEL
        session.add_message(
            "assistant",
            f"An error was detected in the preview. I will attempt to fix it.\n\nError: {error_text}",
            is_auto_fix=True,
        )
        self._persist()

        prompt = build_fix_prompt(
            context.original_prompt,
            context.applied_batch,
            error_text,
            context.pre_failure_tree,
            session.open_ids,
        )
        actions = await self._request(prompt, error_prefix="Auto-fix failed")
        if actions is None:
            return None

        self._state = EngineState.APPLYING
        base = context.pre_failure_tree
        # Tabs for nodes the failed batch created do not exist in the base tree
        open_ids = [i for i in session.open_ids if tree_store.find_by_id(base, i) is not None]
        active_id = session.active_id if session.active_id in open_ids else None
        result = self.interpreter.apply(base, actions, open_ids, active_id)
        self._commit(result)
        session.add_message(
            "assistant",
            "\n".join(["Auto-fix applied:"] + [f"- {line}" for line in result.summary]),
            is_auto_fix=True,
        )

        self._context = None
        self._state = EngineState.IDLE
        logger.info("Auto-fix cycle finished")
        self._persist()
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _request(self, prompt: str, error_prefix: str) -> Optional[List[Action]]:
        """
        Call the model and parse its reply. On failure, records the error
        in the transcript, clears any context and returns to IDLE.
        """
        model = self.session.model
        try:
            reply = await self._complete(prompt, model)
            return self.normalizer.parse_actions(reply)
        except MalformedReplyError as e:
            logger.warning(f"Malformed reply from {model}: {e.message}")
            if error_prefix == "Error":
                content = f"Failed to parse AI response:\n{e.message}"
            else:
                content = f"{error_prefix}: {e.message}"
            self._fail(content)
        except CosmicBuilderError as e:
            logger.error(f"Model call to {model} failed ({e.code}): {e.message}")
            self._fail(f"{error_prefix}: {self.normalizer.normalize_error_message(e.message)}")
        except Exception as e:
            logger.error(f"Unexpected failure calling {model}: {e}", exc_info=True)
            detail = self.normalizer.normalize_error_message(str(e)) or "An unknown error occurred."
            self._fail(f"{error_prefix}: {detail}")
        return None

    def _fail(self, content: str) -> None:
        self.session.add_message("assistant", content, is_error=True)
        self._context = None
        self._state = EngineState.IDLE
        self._persist()

    def _commit(self, result: BatchResult) -> None:
        self.session.tree = result.tree
        self.session.open_ids = list(result.open_ids)
        self.session.active_id = result.active_id
        self._revision += 1

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save_session(self.session)
