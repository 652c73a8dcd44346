"""Variable-width hierarchical layout for an expandable family tree.

Two passes over an arena of nodes indexed by person id:

1. bottom-up: each visible node's width is its own slot width, or the sum of
   its children's widths when it is expanded and that sum is larger
2. top-down: each expanded node's children are laid out left to right and
   centered under the node, one level_spacing further down per generation

Only children of expanded nodes are materialized.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .config import LayoutConfig, load_layout_config
from .models import LayoutNode, LayoutResult, Person
from .person_graph import PersonGraph

logger = logging.getLogger("lineage.tree_layout")


@dataclass
class _Slot:
    person_id: str
    level: int
    spouse_id: str | None = None
    children: list[str] = field(default_factory=list)
    expanded: bool = False
    width: float = 0.0
    x: float = 0.0
    y: float = 0.0


def _candidate_children(graph: PersonGraph, person_id: str, spouse_id: str | None) -> list[str]:
    """Children of the person plus those of the spouse drawn beside them."""
    children = dict.fromkeys(graph.children_of(person_id))
    if spouse_id:
        children.update(dict.fromkeys(graph.children_of(spouse_id)))
    return list(children)


def _build_arena(
    graph: PersonGraph,
    root_id: str,
    expanded: frozenset[str],
) -> tuple[dict[str, _Slot], list[str]]:
    """Materialize the visible part of the tree in preorder.

    A person is placed at most once; the visited set also stops descent
    through parent/child cycles.
    """
    visited: set[str] = set()

    def claim(person_id: str, level: int) -> _Slot:
        visited.add(person_id)
        spouse_id = graph.spouse_of(person_id)
        if spouse_id in visited:
            spouse_id = None
        elif spouse_id:
            visited.add(spouse_id)
        return _Slot(person_id=person_id, level=level, spouse_id=spouse_id)

    arena = {root_id: claim(root_id, 0)}
    order: list[str] = []
    stack = [root_id]
    skipped = 0

    while stack:
        person_id = stack.pop()
        order.append(person_id)
        slot = arena[person_id]
        candidates = _candidate_children(graph, person_id, slot.spouse_id)
        slot.children = [c for c in candidates if c not in visited]
        skipped += len(candidates) - len(slot.children)

        if person_id not in expanded:
            continue
        slot.expanded = True
        for child_id in slot.children:
            arena[child_id] = claim(child_id, slot.level + 1)
        stack.extend(reversed(slot.children))

    # Collapsed nodes may list children that a later expanded node claimed
    for slot in arena.values():
        if not slot.expanded:
            slot.children = [c for c in slot.children if c not in visited]

    if skipped:
        logger.debug(f"Skipped {skipped} child link(s) to people already placed in the tree")
    return arena, order


def _own_width(slot: _Slot, spouse_visible: frozenset[str], config: LayoutConfig) -> float:
    width = config.node_width
    if slot.spouse_id and slot.person_id in spouse_visible:
        width += config.spouse_width
    return width


def compute_layout(
    population: Iterable[Person],
    root_id: str | None,
    expanded: Iterable[str] = (),
    spouse_visible: Iterable[str] = (),
    config: LayoutConfig | None = None,
    origin: tuple[float, float] = (0.0, 0.0),
) -> LayoutResult:
    """
    Compute positions for every visible node of the tree rooted at root_id.

    Args:
        population: Snapshot of people (or a PersonGraph built from one)
        root_id: Root person; None picks the person flagged as root family
        expanded: Ids whose children are visible
        spouse_visible: Ids drawn together with their spouse
        config: Slot widths and level spacing
        origin: Center of the root node

    Returns:
        LayoutResult with nodes in preorder, the root's subtree width and the
        height spanned by the visible levels. Empty when the root is unknown.
    """
    graph = population if isinstance(population, PersonGraph) else PersonGraph(population)
    config = config or load_layout_config()
    # Private immutable copies so the caller can keep toggling state
    expanded = frozenset(expanded)
    spouse_visible = frozenset(spouse_visible)

    if root_id is None:
        root_family = graph.find_root_family()
        root_id = root_family[0] if root_family else None
    if root_id is None or root_id not in graph:
        logger.warning(f"Cannot lay out tree: root {root_id!r} not found among {len(graph)} people")
        return LayoutResult()

    arena, order = _build_arena(graph, root_id, expanded)

    # Pass 1: widths, children before parents
    for person_id in reversed(order):
        slot = arena[person_id]
        own = _own_width(slot, spouse_visible, config)
        if slot.expanded and slot.children:
            slot.width = max(own, sum(arena[c].width for c in slot.children))
        else:
            slot.width = own

    # Pass 2: positions, parents before children
    origin_x, origin_y = origin
    root = arena[root_id]
    root.x, root.y = origin_x, origin_y
    for person_id in order:
        slot = arena[person_id]
        if not (slot.expanded and slot.children):
            continue
        children_width = sum(arena[c].width for c in slot.children)
        left = slot.x - children_width / 2
        for child_id in slot.children:
            child = arena[child_id]
            child.x = left + child.width / 2
            child.y = origin_y + child.level * config.level_spacing
            left += child.width

    nodes = [
        LayoutNode(
            person_id=slot.person_id,
            spouse_id=slot.spouse_id if slot.person_id in spouse_visible else None,
            level=slot.level,
            x=slot.x,
            y=slot.y,
            width=slot.width,
            children_ids=list(slot.children),
            is_expanded=slot.person_id in expanded,
        )
        for slot in (arena[pid] for pid in order)
    ]
    max_level = max(node.level for node in nodes)
    result = LayoutResult(
        nodes=nodes,
        total_width=root.width,
        total_height=(max_level + 1) * config.level_spacing,
    )
    logger.debug(
        f"Layout for {root_id}: {len(nodes)} nodes, "
        f"width {result.total_width}, height {result.total_height}"
    )
    return result
