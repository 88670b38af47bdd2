from __future__ import annotations

from sim_layout_pv import SimulationApplication, format_currency, format_energy
from sim_layout_pv.config import configure_logging


def main() -> None:
    configure_logging()
    app = SimulationApplication(seed=123)
    record = app.run_analysis()

    print(f"{record['verdict']} (score {record['score']})")
    print(f"DC capacity: {record['dcCapacity']:.2f} kWp, AC capacity: {record['acCapacity']:.2f} kW")
    print(f"Annual generation: {format_energy(record['annualGeneration'])}")
    print(f"Annual savings: {format_currency(record['annualSavings'])}")
    print(f"System cost: {format_currency(record['systemCost'])}")
    if record["breakEvenYear"]:
        print(f"Break-even: year {record['breakEvenYear']}, month {record['breakEvenMonth']}")
    for line in record["issues"] + record["suggestions"]:
        print(f" - {line}")


if __name__ == "__main__":
    main()
