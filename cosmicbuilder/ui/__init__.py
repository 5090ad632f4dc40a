# cosmicbuilder/ui/__init__.py
"""
Terminal UI helpers.
"""

from . import colors
from .transcript import format_message, format_tree

__all__ = [
    "colors",
    "format_message",
    "format_tree",
]
