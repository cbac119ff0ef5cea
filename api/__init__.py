"""
Workspace HTTP layer (pure I/O).

Routes call into the client manager and calculation dispatcher through their
public methods and never hold core state of their own.
"""

from .routes import router

__all__ = ["router"]
