from __future__ import annotations


class BatteryBank:
    """
    Pooled storage of every battery in the layout.

    State of charge is carried across hours and months for the whole run;
    call :meth:`reset` only when a new run starts.
    """

    def __init__(
        self,
        capacity_kwh: float,
        soc_init: float = 0.5,
        eta_charge: float = 0.95,
        eta_discharge: float = 0.95,
    ) -> None:
        """
        Initialize the bank.

        Args:
            capacity_kwh: Usable capacity of the whole bank (kWh).
            soc_init: Initial state of charge as fraction (0-1).
            eta_charge: Charging efficiency (0-1).
            eta_discharge: Discharging efficiency (0-1).
        """
        if capacity_kwh < 0:
            raise ValueError("capacity_kwh must be >= 0")
        if not 0.0 <= soc_init <= 1.0:
            raise ValueError("soc_init must be between 0 and 1")
        self.capacity_kwh = capacity_kwh
        self.eta_charge = eta_charge
        self.eta_discharge = eta_discharge
        self.soc_init = soc_init
        self.soc_kwh = soc_init * capacity_kwh

    def reset(self) -> None:
        self.soc_kwh = self.soc_init * self.capacity_kwh

    def charge(self, surplus_kwh: float) -> float:
        """
        Charge the bank from surplus energy.

        Args:
            surplus_kwh: Energy available on the bus (kWh).

        Returns:
            Energy taken from the bus (kWh). The stored amount is this value
            times ``eta_charge``, capped by the remaining headroom.
        """
        if surplus_kwh <= 0.0:
            return 0.0

        storable = surplus_kwh * self.eta_charge
        headroom = self.capacity_kwh - self.soc_kwh
        stored = min(storable, headroom)
        self.soc_kwh += stored
        return stored / self.eta_charge

    def discharge(self, deficit_kwh: float) -> float:
        """
        Discharge the bank to cover a deficit.

        Args:
            deficit_kwh: Energy requested by the load (kWh).

        Returns:
            Energy delivered to the load (kWh); the stored energy drops by
            this value divided by ``eta_discharge``.
        """
        if deficit_kwh <= 0.0:
            return 0.0

        deliverable = self.soc_kwh * self.eta_discharge
        delivered = min(deficit_kwh, deliverable)
        self.soc_kwh = max(0.0, self.soc_kwh - delivered / self.eta_discharge)
        return delivered

    def soc_fraction(self) -> float:
        """
        Get the current state of charge as a fraction (0 for an empty or
        zero-capacity bank).
        """
        if self.capacity_kwh <= 0.0:
            return 0.0
        return self.soc_kwh / self.capacity_kwh
