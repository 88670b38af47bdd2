"""
API route modules for the layout analysis service.

- simulation: full analysis, batch validation, live wire checks and
  power-flow snapshots

All routers are prefixed with /api when included in the main application.
"""

from __future__ import annotations

from .simulation import router as simulation_router

__all__ = ["simulation_router"]
