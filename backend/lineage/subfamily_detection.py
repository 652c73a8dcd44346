"""Detect couples that could found a subfamily and the people they would include."""

import logging
import uuid
from collections.abc import Iterable

from .models import Person, Subfamily, SubfamilySuggestion, SuggestionStatus
from .person_graph import PersonGraph

logger = logging.getLogger("lineage.subfamily_detection")

SUBFAMILY_NAME_PREFIX = "Família"


def find_confirmed_couples(graph: PersonGraph) -> list[tuple[Person, Person]]:
    """All couples whose spouse pointers reference each other, each reported once."""
    return [(graph.get(a), graph.get(b)) for a, b in graph.confirmed_couples]


def collect_subfamily_members(graph: PersonGraph, founder1: Person, founder2: Person) -> list[str]:
    """
    Ids of everyone who would belong to the couple's subfamily.

    Includes the founders, their children (explicit children lists and anyone
    whose father or mother is a founder) and the founders' own parents.
    """
    founder_ids = {founder1.id, founder2.id}
    members: dict[str, None] = {founder1.id: None, founder2.id: None}

    for child_id in (*founder1.children_ids, *founder2.children_ids):
        if child_id:
            members[child_id] = None

    for person in graph:
        if person.father_id in founder_ids or person.mother_id in founder_ids:
            members[person.id] = None

    for founder in (founder1, founder2):
        for parent_id in founder.parent_ids:
            members[parent_id] = None

    return list(members)


def suggest_subfamily_name(founder1: Person, founder2: Person) -> str:
    """Name from the founders' last name tokens, e.g. "Família Silva-Santos"."""
    surname1 = _last_token(founder1.name)
    surname2 = _last_token(founder2.name)
    if surname1 != surname2:
        return f"{SUBFAMILY_NAME_PREFIX} {surname1}-{surname2}"
    return f"{SUBFAMILY_NAME_PREFIX} {surname1}"


def _last_token(name: str) -> str:
    tokens = name.split()
    return tokens[-1] if tokens else name


def subfamily_exists(existing: Iterable[Subfamily], founder1_id: str, founder2_id: str) -> bool:
    pair = {founder1_id, founder2_id}
    return any({s.founder_1_id, s.founder_2_id} == pair for s in existing)


def detect_subfamily_candidates(
    population: Iterable[Person],
    existing_subfamilies: Iterable[Subfamily],
    root_family_id: str = "",
) -> list[SubfamilySuggestion]:
    """Suggest a subfamily for every confirmed couple that does not have one yet."""
    graph = population if isinstance(population, PersonGraph) else PersonGraph(population)
    existing = list(existing_subfamilies)

    couples = find_confirmed_couples(graph)
    logger.info(f"Found {len(couples)} confirmed couple(s)")

    suggestions = []
    for founder1, founder2 in couples:
        if subfamily_exists(existing, founder1.id, founder2.id):
            logger.debug(f"Subfamily already exists for {founder1.id}/{founder2.id}")
            continue

        suggestion = SubfamilySuggestion(
            id=str(uuid.uuid4()),
            founder_1_id=founder1.id,
            founder_2_id=founder2.id,
            suggested_name=suggest_subfamily_name(founder1, founder2),
            member_ids=collect_subfamily_members(graph, founder1, founder2),
            status=SuggestionStatus.PENDING,
            root_family_id=root_family_id,
        )
        suggestions.append(suggestion)
        logger.debug(f"Suggested '{suggestion.suggested_name}' with {len(suggestion.member_ids)} members")

    logger.info(f"Subfamily detection complete: {len(suggestions)} suggestion(s)")
    return suggestions
