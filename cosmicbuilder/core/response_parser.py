"""
Reply normalization for model responses.

Every backend is asked for a bare JSON object, but models still wrap it in
fences or surround it with prose. This layer finds the ``{"actions": [...]}``
object so that downstream logic sees one schema regardless of provider.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List

from cosmicbuilder.core.actions import Action, parse_batch
from cosmicbuilder.core.errors import MalformedReplyError

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)
_LOOSE_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class ReplyNormalizer:
    """
    Stateless parser for model reply text.

    Lookup order:
      1. a ```json fenced block
      2. the widest ``{ ... }`` span in the text
      3. the text as a whole
    """

    def normalize_fences(self, text: str) -> str:
        """Collapse ```jsonc / ```JSON fences into ```json."""
        if not text:
            return ""
        return re.sub(r"```jsonc?\b", "```json", text, flags=re.IGNORECASE)

    def extract_payload(self, text: str) -> Dict[str, Any]:
        """
        Return the decoded reply object.

        Raises:
            MalformedReplyError: If no JSON object can be decoded.
        """
        if not text or not text.strip():
            raise MalformedReplyError("The AI response was empty.", raw_text=text or "")

        text = self.normalize_fences(text)

        fenced = _FENCED_JSON.search(text)
        if fenced:
            try:
                return self._as_object(json.loads(fenced.group(1)), text)
            except json.JSONDecodeError as e:
                logger.debug(f"Fenced JSON block did not decode: {e}")

        loose = _LOOSE_OBJECT.search(text)
        if loose:
            try:
                return self._as_object(json.loads(loose.group(0)), text)
            except json.JSONDecodeError as e:
                logger.debug(f"Loose JSON match did not decode: {e}")
                raise MalformedReplyError(
                    f"Could not find a valid JSON object in the response. Raw response: {text}",
                    raw_text=text,
                )

        try:
            return self._as_object(json.loads(text), text)
        except json.JSONDecodeError:
            raise MalformedReplyError(
                f"No valid JSON object found in the AI response. Raw response: {text}",
                raw_text=text,
            )

    def _as_object(self, data: Any, text: str) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise MalformedReplyError(
                f"Expected a JSON object with an 'actions' key. Raw response: {text}",
                raw_text=text,
            )
        return data

    def parse_actions(self, text: str) -> List[Action]:
        """Decode reply text into a parsed action batch."""
        payload = self.extract_payload(text)
        try:
            return parse_batch(payload)
        except MalformedReplyError as e:
            e.raw_text = text
            raise

    def normalize_error_message(self, text: str) -> str:
        """
        Concise single-line error text: strips "Error:" style prefixes
        and line breaks.
        """
        if not text:
            return ""
        cleaned = re.sub(r"^\s*(Error|ERROR|Exception)[:\-]\s*", "", text).strip()
        return cleaned.replace("\r", " ").replace("\n", " ")

