"""In-memory index over a snapshot of person records."""

import logging
from collections.abc import Iterable

from .models import Person

logger = logging.getLogger("lineage.person_graph")


class PersonGraph:
    """Lookup structures over a flat list of people.

    Builds three indices from the snapshot:
    - id -> Person
    - parent id -> child ids (explicit children lists reconciled with the
      father/mother pointers of every person)
    - confirmed couples (both spouse pointers reference each other)

    The graph is never mutated after construction.
    """

    def __init__(self, people: Iterable[Person]):
        self._people: dict[str, Person] = {}
        for person in people:
            if person.id in self._people:
                logger.warning(f"Duplicate person id in snapshot: {person.id} (keeping last record)")
            self._people[person.id] = person

        self._children: dict[str, list[str]] = {}
        self._couples: list[tuple[str, str]] = []
        self._spouse: dict[str, str] = {}

        self._index_children()
        self._index_couples()
        logger.debug(
            f"Indexed {len(self._people)} people, {len(self._couples)} confirmed couples"
        )

    def _index_children(self) -> None:
        def add(parent_id: str, child_id: str) -> None:
            children = self._children.setdefault(parent_id, [])
            if child_id not in children:
                children.append(child_id)

        # Explicit lists first so their order is kept
        for person in self._people.values():
            for child_id in person.children_ids:
                if child_id and child_id in self._people:
                    add(person.id, child_id)

        for person in self._people.values():
            for parent_id in person.parent_ids:
                add(parent_id, person.id)

    def _index_couples(self) -> None:
        processed: set[str] = set()
        for person in self._people.values():
            spouse_id = person.spouse_id
            if not spouse_id or spouse_id == person.id or person.id in processed:
                continue
            spouse = self._people.get(spouse_id)
            if spouse is not None and spouse.spouse_id == person.id:
                self._couples.append((person.id, spouse.id))
                self._spouse[person.id] = spouse.id
                self._spouse[spouse.id] = person.id
                processed.add(person.id)
                processed.add(spouse.id)

    def __len__(self) -> int:
        return len(self._people)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self._people

    def __iter__(self):
        return iter(self._people.values())

    def get(self, person_id: str | None) -> Person | None:
        if person_id is None:
            return None
        return self._people.get(person_id)

    @property
    def people(self) -> list[Person]:
        return list(self._people.values())

    @property
    def confirmed_couples(self) -> list[tuple[str, str]]:
        """Each confirmed couple once, in snapshot order."""
        return list(self._couples)

    def children_of(self, person_id: str) -> list[str]:
        return list(self._children.get(person_id, []))

    def parents_of(self, person_id: str) -> list[str]:
        person = self._people.get(person_id)
        return person.parent_ids if person else []

    def spouse_of(self, person_id: str) -> str | None:
        """Confirmed spouse id, or None when the pointers disagree."""
        return self._spouse.get(person_id)

    def find_root_family(self) -> tuple[str, str | None] | None:
        """Return the root couple (or single root person) flagged in the snapshot."""
        flagged = [p for p in self._people.values() if p.is_root_family]
        if not flagged:
            return None
        first = flagged[0]
        for other in flagged[1:]:
            if first.spouse_id == other.id:
                return first.id, other.id
            if other.spouse_id == first.id:
                return other.id, first.id
        return first.id, None

    def find_ancestry_cycle(self) -> list[str] | None:
        """Return the ids along a parent -> child cycle, or None if the graph is a forest.

        Iterative DFS with white/grey/black colouring so deep trees do not hit
        the recursion limit.
        """
        done: set[str] = set()
        for start in self._people:
            if start in done:
                continue
            path: list[str] = [start]
            on_path: set[str] = {start}
            stack = [iter(self._children.get(start, []))]
            while stack:
                child = next(stack[-1], None)
                if child is None:
                    stack.pop()
                    finished = path.pop()
                    on_path.discard(finished)
                    done.add(finished)
                    continue
                if child in on_path:
                    return path[path.index(child):] + [child]
                if child in done:
                    continue
                path.append(child)
                on_path.add(child)
                stack.append(iter(self._children.get(child, [])))
        return None
