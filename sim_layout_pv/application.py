from __future__ import annotations

import logging
import time
from typing import Any, Dict, Mapping

import numpy as np

from .config import get_default_seed, get_reference_year
from .layout_io import LayoutSource, load_layout_data
from .simulation.engine import SimulationResult, run_simulation
from .simulation.layout import Layout
from .simulation.params import SimulationParams
from .simulation.power_flow import BatteryLimits, calculate_flows
from .simulation.validator import validate, validate_connection

logger = logging.getLogger(__name__)

_UNSET = object()


class SimulationApplication:
    """
    High-level orchestrator used by the CLI and the FastAPI surface.

    Owns RNG seeding for the shadow sampling: an explicit seed wins, then
    ``SIM_LAYOUT_PV_SEED``, then fresh entropy.
    """

    def __init__(self, *, seed: int | None | object = _UNSET, reference_year: int | None = None) -> None:
        """
        Args:
            seed: Default seed for every run; reads the environment when omitted.
            reference_year: Year of the sun samples; reads the environment when omitted.
        """
        self.seed = get_default_seed() if seed is _UNSET else seed
        self.reference_year = reference_year if reference_year is not None else get_reference_year()

    def _rng(self, seed: int | None) -> np.random.Generator:
        chosen = self.seed if seed is None else seed
        return np.random.default_rng(chosen)

    def simulate(
        self,
        objects: Any,
        wires: Any = None,
        params: SimulationParams | Mapping[str, Any] | None = None,
        *,
        seed: int | None = None,
    ) -> SimulationResult:
        """
        Run the full analysis of a layout.

        Args:
            objects: Layout or editor object list.
            wires: Editor wire list.
            params: Site and economic parameters.
            seed: Per-call seed overriding the application default.

        Returns:
            SimulationResult of the run.
        """
        layout = Layout.coerce(objects, wires)
        started = time.perf_counter()
        result = run_simulation(
            layout,
            params=params,
            rng=self._rng(seed),
            reference_year=self.reference_year,
        )
        logger.info(
            "Simulated %d objects / %d wires in %.0f ms: score %d (%s), %.0f kWh/year",
            len(layout.objects),
            len(layout.wires),
            (time.perf_counter() - started) * 1000.0,
            result.score,
            result.verdict,
            result.energy.annual_generation,
        )
        return result

    def run_analysis(self, layout_data: LayoutSource = None, *, seed: int | None = None) -> Dict[str, Any]:
        """
        Analyse a layout document (path, mapping, or the bundled example).

        Returns:
            The camelCase result record.
        """
        data = load_layout_data(layout_data)
        result = self.simulate(data["objects"], data["wires"], data.get("params"), seed=seed)
        return result.to_dict()

    def validate(self, objects: Any, wires: Any = None) -> Dict[str, Any]:
        report = validate(objects, wires)
        logger.info("Validation: %d issues, %d checks passed", len(report.issues), len(report.validations))
        return report.to_dict()

    def check_connection(self, from_obj: Any, to_obj: Any, wire_type: str) -> Dict[str, str] | None:
        feedback = validate_connection(from_obj, to_obj, wire_type)
        return None if feedback is None else feedback.to_dict()

    def flows(
        self,
        objects: Any,
        wires: Any = None,
        *,
        sun_hour: float = 12.0,
        priority: Any = None,
        battery_limits: Mapping[str, Any] | None = None,
    ) -> Dict[str, Dict[str, Any]]:
        limits = {
            key: value if isinstance(value, BatteryLimits) else BatteryLimits.from_dict(value)
            for key, value in (battery_limits or {}).items()
        }
        kwargs: Dict[str, Any] = {"sun_hour": sun_hour, "battery_limits": limits}
        if priority:
            kwargs["priority"] = tuple(priority)
        snapshot = calculate_flows(Layout.coerce(objects, wires), **kwargs)
        return {object_id: flow.to_dict() for object_id, flow in snapshot.items()}
