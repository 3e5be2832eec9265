"""Persistence entry point: Session helpers and model exports."""

from .database import get_engine, get_session_factory, session_scope
from . import models

__all__ = [
    "get_engine",
    "get_session_factory",
    "session_scope",
    "models",
]
