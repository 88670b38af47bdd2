"""
Undirected adjacency graph over a :class:`~.layout.Layout`.

The graph is rebuilt on every validation or simulation call from the
explicit wires plus implicit links between touching panels. Nodes are the
integer positions of the objects in the layout arena.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Set, Tuple

from .layout import DISTRIBUTION_BOARD_TAGS, Layout, ObjectType, PlacedObject, WireConnection

logger = logging.getLogger(__name__)

PANEL_PROXIMITY_MARGIN_M = 0.2
"""Gap (m) under which two panel bounding boxes count as a touching string."""


def panels_touch(first: PlacedObject, second: PlacedObject, margin: float = PANEL_PROXIMITY_MARGIN_M) -> bool:
    return not (
        second.x > first.x + first.w + margin
        or second.x + second.w + margin < first.x
        or second.y > first.y + first.h + margin
        or second.y + second.h + margin < first.y
    )


def _is_disabled_board(obj: PlacedObject) -> bool:
    return obj.is_switched_off and obj.has_tag(DISTRIBUTION_BOARD_TAGS)


def active_wires(
    layout: Layout,
    skip_disabled_boards: bool = True,
) -> Iterator[Tuple[WireConnection, int, int]]:
    """
    Yield ``(wire, source_index, target_index)`` for every wire that takes
    part in the graph.

    Wires referencing unknown ids are dropped; so are wires touching a
    switched-off ACDB/LT/HT board when ``skip_disabled_boards`` is set.
    """
    for wire in layout.wires:
        src = layout.index_of(wire.from_id)
        dst = layout.index_of(wire.to_id)
        if src is None or dst is None:
            logger.debug("Wire %s references unknown objects; ignored", wire.id)
            continue
        if skip_disabled_boards and (
            _is_disabled_board(layout.objects[src]) or _is_disabled_board(layout.objects[dst])
        ):
            continue
        yield wire, src, dst


@dataclass
class AdjacencyGraph:
    """
    Adjacency lists indexed by layout position.

    Attributes:
        layout: Arena the indices refer to.
        neighbors: ``neighbors[i]`` lists the indices adjacent to node ``i``
            (one entry per wire, so parallel wires repeat a neighbor).
    """

    layout: Layout
    neighbors: List[List[int]]

    def neighbors_of(self, idx: int) -> List[int]:
        return self.neighbors[idx]

    def degree(self, idx: int) -> int:
        """Number of distinct neighbors of ``idx``."""
        return len(set(self.neighbors[idx]))

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Yield each undirected edge once as ``(low, high)``."""
        seen: Set[Tuple[int, int]] = set()
        for idx, adjacent in enumerate(self.neighbors):
            for other in adjacent:
                key = (idx, other) if idx < other else (other, idx)
                if key in seen:
                    continue
                seen.add(key)
                yield key

    def traverse(
        self,
        start: int,
        can_expand: Callable[[int], bool] | None = None,
        can_visit: Callable[[int], bool] | None = None,
    ) -> Iterator[int]:
        """
        Breadth-first walk from ``start`` (included).

        Args:
            start: Node index to start from.
            can_expand: Optional predicate; neighbors of a node are only
                queued when it returns True for that node.
            can_visit: Optional predicate; a neighbor is only entered when it
                returns True for it. ``start`` is always visited.
        """
        visited = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            yield current
            if can_expand is not None and not can_expand(current):
                continue
            for nxt in self.neighbors[current]:
                if nxt in visited:
                    continue
                if can_visit is None or can_visit(nxt):
                    visited.add(nxt)
                    queue.append(nxt)

    def find(
        self,
        start: int,
        is_target: Callable[[PlacedObject], bool],
    ) -> Optional[int]:
        """Return the first node (BFS order, ``start`` included) matching ``is_target``."""
        objects = self.layout.objects
        for idx in self.traverse(start):
            if is_target(objects[idx]):
                return idx
        return None

    def reaches(self, start: int, is_target: Callable[[PlacedObject], bool]) -> bool:
        return self.find(start, is_target) is not None


def build_graph(
    layout: Layout,
    *,
    skip_disabled_boards: bool = True,
    link_touching_panels: bool = True,
) -> AdjacencyGraph:
    """
    Build the adjacency graph of a layout.

    Args:
        layout: Objects and wires to connect.
        skip_disabled_boards: Drop wires touching an ACDB/LT/HT board whose
            ``isOn`` is False.
        link_touching_panels: Add implicit edges between panels whose
            bounding boxes overlap within :data:`PANEL_PROXIMITY_MARGIN_M`.

    Returns:
        AdjacencyGraph over the layout indices. Wires referencing unknown
        ids are ignored.
    """
    neighbors: List[List[int]] = [[] for _ in layout.objects]

    for _wire, src, dst in active_wires(layout, skip_disabled_boards):
        neighbors[src].append(dst)
        neighbors[dst].append(src)

    if link_touching_panels:
        panel_idx = layout.indices_of_type(ObjectType.PANEL)
        for pos, i in enumerate(panel_idx):
            for j in panel_idx[pos + 1:]:
                if panels_touch(layout.objects[i], layout.objects[j]):
                    neighbors[i].append(j)
                    neighbors[j].append(i)

    logger.debug(
        "Built graph with %d nodes and %d wires",
        len(layout.objects),
        len(layout.wires),
    )
    return AdjacencyGraph(layout=layout, neighbors=neighbors)
