from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

import numpy as np
import pandas as pd

from .battery import BatteryBank
from .layout import Layout, ObjectType, PlacedObject
from .load_profiles import DAYS_PER_MONTH, DailyShapeLoadProfile, LoadProfile
from .plc import PlcProgram
from .solar import MONTH_NAMES, SolarModel

logger = logging.getLogger(__name__)

DEFAULT_INVERTER_EFFICIENCY_PCT = 97.5


def weighted_inverter_efficiency(inverters: List[PlacedObject]) -> float:
    """
    Capacity-weighted inverter efficiency as a fraction.

    Each inverter reads ``specifications["efficiency"]`` in percent (default
    97.5). Falls back to 97.5 % when there are no inverters or the capacity
    weights sum to zero.
    """
    total_kw = sum(inv.cap_kw for inv in inverters)
    if not inverters or total_kw <= 0:
        return DEFAULT_INVERTER_EFFICIENCY_PCT / 100.0
    weighted = sum(inv.spec_float("efficiency", DEFAULT_INVERTER_EFFICIENCY_PCT) * inv.cap_kw for inv in inverters)
    return weighted / total_kw / 100.0


@dataclass(frozen=True)
class SystemCapacities:
    """
    Nameplate totals of a layout.

    Attributes:
        dc_kwp: Sum of panel watts / 1000.
        ac_kw: Sum of inverter ``capKw``.
        battery_kwh: Sum of battery ``capKwh``.
        inverter_efficiency: Capacity-weighted efficiency (0-1).
    """

    dc_kwp: float = 0.0
    ac_kw: float = 0.0
    battery_kwh: float = 0.0
    inverter_efficiency: float = DEFAULT_INVERTER_EFFICIENCY_PCT / 100.0

    @classmethod
    def from_layout(cls, layout: Layout) -> "SystemCapacities":
        inverters = layout.of_type(ObjectType.INVERTER)
        return cls(
            dc_kwp=sum(panel.watts for panel in layout.of_type(ObjectType.PANEL)) / 1000.0,
            ac_kw=sum(inv.cap_kw for inv in inverters),
            battery_kwh=sum(bat.cap_kwh for bat in layout.of_type(ObjectType.BATTERY)),
            inverter_efficiency=weighted_inverter_efficiency(inverters),
        )

    @property
    def dc_ac_ratio(self) -> Optional[float]:
        if self.ac_kw <= 0:
            return None
        return self.dc_kwp / self.ac_kw


@dataclass
class EnergyBalanceConfig:
    """
    Economic and battery parameters of the energy balance.

    Attributes:
        grid_rate: Import tariff (currency per kWh).
        export_rate: Export tariff (currency per kWh).
        shadow_derate: ``1 - shadow loss``.
        eta_charge: Battery charging efficiency (0-1).
        eta_discharge: Battery discharging efficiency (0-1).
        soc_init: Battery state of charge at the start of January.
        days_per_month: Scale from the representative day to the month.
    """

    grid_rate: float = 8.5
    export_rate: float = 3.0
    shadow_derate: float = 1.0
    eta_charge: float = 0.95
    eta_discharge: float = 0.95
    soc_init: float = 0.5
    days_per_month: int = DAYS_PER_MONTH


@dataclass
class MonthlyRecord:
    """Energy (kWh) and money totals of one simulated month."""

    month: str
    generation: float
    load: float
    net_export: float
    net_import: float
    savings: float
    export_value: float
    import_cost: float
    gross_metering_income: float
    shadow_loss: float
    unmet_load: float
    battery_charge: float = 0.0
    battery_discharge: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "generation": self.generation,
            "load": self.load,
            "netExport": self.net_export,
            "netImport": self.net_import,
            "savings": self.savings,
            "exportValue": self.export_value,
            "importCost": self.import_cost,
            "grossMeteringIncome": self.gross_metering_income,
            "shadowLoss": self.shadow_loss,
            "unmetLoad": self.unmet_load,
        }


@dataclass
class EnergyBalanceResult:
    """
    Output of one energy balance run.

    Attributes:
        capacities: Nameplate totals used by the run.
        monthly: Twelve monthly records (January first).
        df_hourly: 288 rows (12 months x 24 hours) of the representative
            days, energies in kWh for a single day.
    """

    capacities: SystemCapacities
    monthly: List[MonthlyRecord] = field(default_factory=list)
    df_hourly: pd.DataFrame = field(default_factory=pd.DataFrame)

    @property
    def df_monthly(self) -> pd.DataFrame:
        return pd.DataFrame([record.__dict__ for record in self.monthly])

    @property
    def annual_generation(self) -> float:
        return float(sum(record.generation for record in self.monthly))

    @property
    def annual_savings(self) -> float:
        return float(sum(record.savings for record in self.monthly))

    @property
    def annual_load(self) -> float:
        return float(sum(record.load for record in self.monthly))

    @property
    def annual_unmet_load(self) -> float:
        return float(sum(record.unmet_load for record in self.monthly))

    @property
    def monthly_generation(self) -> List[float]:
        return [record.generation for record in self.monthly]

    @property
    def monthly_shadow_loss(self) -> List[float]:
        return [record.shadow_loss for record in self.monthly]


class EnergyBalanceSimulator:
    """
    Hourly generation / load / battery / grid balance over twelve
    representative days.

    The battery state of charge carries across hours and across months of
    the same run; :meth:`run` resets it only at the start. Grid
    availability follows the layout's ``master_plc`` rules: an active Time
    trip targeting a grid removes the grid for that hour, an active
    Interlock trip removes it for the whole run.
    """

    def __init__(
        self,
        config: EnergyBalanceConfig,
        capacities: SystemCapacities,
        solar_model: SolarModel,
        load_profile: LoadProfile,
        plc: PlcProgram | None = None,
        grid_ids: Set[str] | None = None,
        interlock_tripped: Set[str] | None = None,
    ) -> None:
        self.config = config
        self.capacities = capacities
        self.solar_model = solar_model
        self.load_profile = load_profile
        self.plc = plc or PlcProgram()
        self.grid_ids = set(grid_ids or ())
        self.interlock_tripped = set(interlock_tripped or ())
        self.battery_bank = BatteryBank(
            capacity_kwh=capacities.battery_kwh,
            soc_init=config.soc_init,
            eta_charge=config.eta_charge,
            eta_discharge=config.eta_discharge,
        )

    @classmethod
    def from_layout(
        cls,
        layout: Layout,
        config: EnergyBalanceConfig,
        base_load: float,
    ) -> "EnergyBalanceSimulator":
        capacities = SystemCapacities.from_layout(layout)
        plc = PlcProgram.from_layout(layout)
        return cls(
            config=config,
            capacities=capacities,
            solar_model=SolarModel(
                pv_kwp=capacities.dc_kwp,
                shadow_derate=config.shadow_derate,
                inverter_efficiency=capacities.inverter_efficiency,
            ),
            load_profile=DailyShapeLoadProfile.from_layout(layout, base_load),
            plc=plc,
            grid_ids={obj.id for obj in layout.of_type(ObjectType.GRID)},
            interlock_tripped=plc.interlock_trips(layout),
        )

    def grid_available(self, hour: int) -> bool:
        if self.grid_ids & self.interlock_tripped:
            return False
        return not (self.grid_ids & self.plc.time_trips(hour))

    def run(self) -> EnergyBalanceResult:
        """
        Simulate the twelve representative days.

        Every hour satisfies
        ``generation + battery_discharge + grid_import + unmet
        = load + battery_charge + export``, where the battery columns are
        measured on the AC bus (before charge and after discharge losses).
        """
        cfg = self.config
        self.battery_bank.reset()
        days = cfg.days_per_month

        hourly_rows: List[Dict[str, Any]] = []
        monthly: List[MonthlyRecord] = []

        for month in range(12):
            gen_kw = self.solar_model.daily_profile_kw(month)
            unshaded_kw = self.solar_model.unshaded_profile_kw(month)
            load_kw = self.load_profile.daily_profile_kw(month)

            # One-hour steps: kW equals kWh.
            # generation, load, export, import, shadow, unmet
            totals = np.zeros(6)
            charged = 0.0
            discharged = 0.0
            for hour in range(24):
                generation = float(gen_kw[hour])
                load = float(load_kw[hour])
                grid_ok = self.grid_available(hour)

                charge_used = discharge_delivered = export = grid_import = unmet = 0.0
                net = generation - load
                if net > 0:
                    charge_used = self.battery_bank.charge(net)
                    export = net - charge_used
                elif net < 0:
                    deficit = -net
                    discharge_delivered = self.battery_bank.discharge(deficit)
                    deficit -= discharge_delivered
                    if grid_ok:
                        grid_import = deficit
                    else:
                        unmet = deficit

                shadow = float(unshaded_kw[hour]) - generation
                totals += (generation, load, export, grid_import, shadow, unmet)
                charged += charge_used
                discharged += discharge_delivered
                hourly_rows.append(
                    {
                        "month": month,
                        "hour": hour,
                        "generation": generation,
                        "load": load,
                        "battery_charge": charge_used,
                        "battery_discharge": discharge_delivered,
                        "export": export,
                        "import": grid_import,
                        "unmet": unmet,
                        "shadow_loss": shadow,
                        "soc": self.battery_bank.soc_fraction(),
                        "grid_available": grid_ok,
                    }
                )

            gen, load, export, grid_import, shadow, unmet = totals * days
            export_value = export * cfg.export_rate
            import_cost = grid_import * cfg.grid_rate
            monthly.append(
                MonthlyRecord(
                    month=MONTH_NAMES[month],
                    generation=float(gen),
                    load=float(load),
                    net_export=float(export),
                    net_import=float(grid_import),
                    savings=float(load * cfg.grid_rate - (import_cost - export_value)),
                    export_value=float(export_value),
                    import_cost=float(import_cost),
                    gross_metering_income=float(gen * cfg.export_rate),
                    shadow_loss=float(shadow),
                    unmet_load=float(unmet),
                    battery_charge=charged * days,
                    battery_discharge=discharged * days,
                )
            )

        result = EnergyBalanceResult(
            capacities=self.capacities,
            monthly=monthly,
            df_hourly=pd.DataFrame(hourly_rows),
        )
        logger.debug(
            "Energy balance: %.1f kWh generated, %.1f kWh load, %.1f kWh unmet",
            result.annual_generation,
            result.annual_load,
            result.annual_unmet_load,
        )
        return result


def simulate_energy_balance(
    objects: Layout | List[Any],
    shadow_derate: float,
    grid_rate: float,
    export_rate: float,
    base_load: float,
) -> EnergyBalanceResult:
    """
    Run the energy balance for a layout.

    Args:
        objects: Layout or editor object list.
        shadow_derate: ``1 - shadow loss`` (0-1).
        grid_rate: Import tariff.
        export_rate: Export tariff.
        base_load: Baseline monthly consumption (kWh) added to the load boxes.
    """
    layout = Layout.coerce(objects)
    config = EnergyBalanceConfig(grid_rate=grid_rate, export_rate=export_rate, shadow_derate=shadow_derate)
    return EnergyBalanceSimulator.from_layout(layout, config, base_load).run()
