"""Router modules, imported by the FastAPI entrypoint."""

from . import admin, diagnostics, webhook

__all__ = ["admin", "diagnostics", "webhook"]
