from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

DEFAULT_LAYOUT_PATH = Path(__file__).resolve().parent / "examples" / "default_layout.json"

LayoutSource = Mapping[str, Any] | str | Path | None


def load_layout_data(source: LayoutSource = None) -> dict[str, Any]:
    """
    Load a layout document from JSON or return the provided mapping.

    A layout document holds ``objects``, ``wires`` and optionally ``params``.

    Args:
        source: Path to a JSON file, mapping, or None for the bundled example.

    Returns:
        Dictionary with at least the ``objects`` and ``wires`` keys.
    """
    if source is None:
        data = json.loads(DEFAULT_LAYOUT_PATH.read_text(encoding="utf-8"))
    elif isinstance(source, (str, Path)):
        data = json.loads(Path(source).read_text(encoding="utf-8"))
    else:
        data = dict(source)
    data.setdefault("objects", [])
    data.setdefault("wires", [])
    return data
