from __future__ import annotations

from sim_layout_pv.formatting import format_currency, format_energy


def test_format_currency_uses_indian_grouping() -> None:
    assert format_currency(1234567.4) == "₹12,34,567"
    assert format_currency(999) == "₹999"
    assert format_currency(100000) == "₹1,00,000"
    assert format_currency(-4500.6) == "-₹4,501"


def test_format_energy_switches_to_mwh() -> None:
    assert format_energy(999.4) == "999 kWh"
    assert format_energy(1000) == "1.0 MWh"
    assert format_energy(6543.2) == "6.5 MWh"
