from __future__ import annotations

from ..application import SimulationApplication


def get_application_service() -> SimulationApplication:
    """
    Provide a SimulationApplication configured for API usage.

    Seed and reference year come from the environment; requests may
    still pass their own seed.
    """
    return SimulationApplication()
