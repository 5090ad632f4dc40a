"""
Service Layer

Configuration and session persistence services.
"""

from cosmicbuilder.services.config_service import ConfigService
from cosmicbuilder.services.session_store import SessionStore

__all__ = [
    "ConfigService",
    "SessionStore",
]
