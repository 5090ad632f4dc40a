# cosmicbuilder/core/preview.py
"""
Preview markup builder.

Produces one self-contained HTML string from ``<root>/index.html``: local
``<link href>`` stylesheets and ``<script src>`` files are inlined from the
tree, remote (http/https) references are left alone. The external preview
surface renders it and reports back at most one runtime error.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from cosmicbuilder.core import tree_store
from cosmicbuilder.core.constants import PREVIEW_ROOT
from cosmicbuilder.core.tree_store import FileNode, Tree

logger = logging.getLogger(__name__)

_LINK_TAG = re.compile(r'<link\s+.*?href="([^"]+)"[^>]*>')
_SCRIPT_TAG = re.compile(r'<script\s+.*?src="([^"]+)"[^>]*></script>')


@dataclass(frozen=True)
class PreviewError:
    """Runtime error reported by the preview surface."""
    message: str
    line: Optional[int] = None
    column: Optional[int] = None

    def describe(self) -> str:
        return f"Error in preview: {self.message} at line {self.line}, column {self.column}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PreviewError":
        def _int(value: Any) -> Optional[int]:
            try:
                return int(value)
            except (TypeError, ValueError):
                return None

        return cls(
            message=str(data.get("message", "")),
            line=_int(data.get("line")),
            column=_int(data.get("column")),
        )


def _is_remote(ref: str) -> bool:
    return ref.startswith("http")


def _resolve_asset(tree: Tree, root: str, ref: str) -> Optional[FileNode]:
    node = tree_store.find_by_path(tree, f"{root}/{ref}")
    if isinstance(node, FileNode) and node.content:
        return node
    return None


def build_preview_html(tree: Tree, root: str = PREVIEW_ROOT) -> str:
    """Self-contained markup for ``<root>/index.html``."""
    index = tree_store.find_by_path(tree, f"{root}/index.html")
    if not isinstance(index, FileNode):
        return f"<h1>index.html not found in {root} folder</h1>"

    def _inline_css(match: "re.Match[str]") -> str:
        href = match.group(1)
        if _is_remote(href):
            return match.group(0)
        asset = _resolve_asset(tree, root, href)
        if asset is None:
            logger.debug(f"Preview: stylesheet not found: {href}")
            return f"<!-- CSS file not found: {href} -->"
        return f"<style>{asset.content}</style>"

    def _inline_js(match: "re.Match[str]") -> str:
        src = match.group(1)
        if _is_remote(src):
            return match.group(0)
        asset = _resolve_asset(tree, root, src)
        if asset is None:
            logger.debug(f"Preview: script not found: {src}")
            return f"<!-- JS file not found: {src} -->"
        return f"<script>{asset.content}</script>"

    html = _LINK_TAG.sub(_inline_css, index.content or "")
    return _SCRIPT_TAG.sub(_inline_js, html)
