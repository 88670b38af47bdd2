from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, Sequence

from .application import SimulationApplication
from .config import configure_logging
from .formatting import format_currency, format_energy
from .layout_io import load_layout_data


def build_argument_parser() -> argparse.ArgumentParser:
    """
    Build the CLI argument parser used by entry points.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(description="Solar layout analysis CLI")
    sub = parser.add_subparsers(dest="command")

    simulate = sub.add_parser("simulate", help="Run the full analysis of a layout")
    simulate.add_argument(
        "--layout-file",
        type=str,
        default=None,
        help="Path to a layout JSON (objects, wires, params); defaults to the bundled example",
    )
    simulate.add_argument("--seed", type=int, default=None, help="Seed for the shadow sampling")
    simulate.add_argument(
        "--summary",
        action="store_true",
        help="Print a short human-readable summary instead of the JSON record",
    )

    validate = sub.add_parser("validate", help="Run the batch topology checks")
    validate.add_argument("--layout-file", type=str, default=None)

    check = sub.add_parser("check-wire", help="Check a single wire between two objects of a layout")
    check.add_argument("--layout-file", type=str, default=None)
    check.add_argument("--from", dest="from_id", required=True, help="Source object id")
    check.add_argument("--to", dest="to_id", required=True, help="Target object id")
    check.add_argument(
        "--type",
        dest="wire_type",
        choices=["dc", "ac", "earth"],
        default="dc",
        help="Wire type",
    )

    flows = sub.add_parser("flows", help="Compute the power-flow snapshot at one sun hour")
    flows.add_argument("--layout-file", type=str, default=None)
    flows.add_argument("--hour", type=float, default=12.0, help="Sun hour (0-24)")
    flows.add_argument(
        "--priority",
        type=str,
        default=None,
        help="Comma separated source order (e.g. Solar,Battery,Grid)",
    )

    serve = sub.add_parser("serve", help="Start the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser


def _load_json_file(path: str | Path) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise SystemExit(f"File not found: {file_path}")
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON file ({file_path}): {exc}") from exc


def _load_layout(path: str | None) -> dict[str, Any]:
    return load_layout_data(_load_json_file(path) if path else None)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def _parse_priority(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    values = [token.strip() for token in raw.split(",") if token.strip()]
    unknown = [value for value in values if value not in ("Solar", "Battery", "Grid")]
    if unknown:
        raise SystemExit(f"Unknown priority sources: {', '.join(unknown)}")
    return values


def _find_object(layout: Dict[str, Any], object_id: str) -> Dict[str, Any]:
    for obj in layout["objects"]:
        if str(obj.get("id")) == object_id:
            return obj
    raise SystemExit(f"Object not found: {object_id}")


def _print_summary(record: Dict[str, Any]) -> None:
    break_even = record["breakEvenYear"]
    lines = [
        f"Verdict:        {record['verdict']} (score {record['score']})",
        f"DC / AC:        {record['dcCapacity']:.2f} kWp / {record['acCapacity']:.2f} kW",
        f"Battery:        {record['batteryCapacity']:.1f} kWh ({record['batteryBackupHours']:.1f} h backup)",
        f"Generation:     {format_energy(record['annualGeneration'])} / year",
        f"Savings:        {format_currency(record['annualSavings'])} / year",
        f"System cost:    {format_currency(record['systemCost'])}",
        f"Shadow loss:    {record['shadowLoss'] * 100:.1f}%",
        "Break-even:     "
        + (f"year {break_even}, month {record['breakEvenMonth']}" if break_even else "not reached"),
    ]
    for issue in record["issues"]:
        lines.append(f"  - {issue}")
    for suggestion in record["suggestions"]:
        lines.append(f"  * {suggestion}")
    print("\n".join(lines))


def main(argv: Sequence[str] | None = None) -> None:
    """
    CLI entry point for analysing, validating and serving layouts.

    Args:
        argv: Optional sequence of CLI args (defaults to sys.argv).
    """
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    configure_logging()

    if args.command == "serve":
        import uvicorn

        from .api.app import create_app

        uvicorn.run(create_app(), host=args.host, port=args.port)
        return

    try:
        app = SimulationApplication()
        layout = _load_layout(args.layout_file)

        if args.command == "simulate":
            result = app.simulate(
                layout["objects"],
                layout["wires"],
                layout.get("params"),
                seed=args.seed,
            )
            record = result.to_dict()
            if args.summary:
                _print_summary(record)
            else:
                _print_json(record)
            return

        if args.command == "validate":
            _print_json(app.validate(layout["objects"], layout["wires"]))
            return

        if args.command == "check-wire":
            feedback = app.check_connection(
                _find_object(layout, args.from_id),
                _find_object(layout, args.to_id),
                args.wire_type,
            )
            _print_json({"ok": feedback is None or feedback["type"] != "error", "feedback": feedback})
            return

        if args.command == "flows":
            _print_json(
                app.flows(
                    layout["objects"],
                    layout["wires"],
                    sun_hour=args.hour,
                    priority=_parse_priority(args.priority),
                )
            )
            return
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    parser.error(f"Unknown command: {args.command}")


if __name__ == "__main__":
    main()
