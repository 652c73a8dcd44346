"""Materialize an accepted subfamily suggestion into a subfamily and member records."""

import logging
import uuid
from collections.abc import Iterable
from typing import Protocol

from .errors import FounderNotFoundError
from .models import (
    FamilyMember,
    FamilyRole,
    Person,
    Subfamily,
    SubfamilySuggestion,
    SuggestionStatus,
    TreeElement,
)
from .person_graph import PersonGraph

logger = logging.getLogger("lineage.subfamily_assembly")

SUBFAMILY_LEVEL = 1  # nesting under other subfamilies is not supported yet


class RoleInference(Protocol):
    """Picks the gendered role for a child or grandparent of the founders."""

    def child_role(self, person: Person | None) -> FamilyRole: ...

    def grandparent_role(self, person: Person | None) -> FamilyRole: ...


class NameLetterRoleInference:
    """Default strategy: a name containing the letter "a" is read as female.

    This is a crude heuristic kept for compatibility with existing records;
    plug in a different RoleInference when real gender data is available.
    """

    @staticmethod
    def _looks_female(person: Person | None) -> bool:
        return person is not None and "a" in person.name.lower()

    def child_role(self, person: Person | None) -> FamilyRole:
        return FamilyRole.DAUGHTER if self._looks_female(person) else FamilyRole.SON

    def grandparent_role(self, person: Person | None) -> FamilyRole:
        if self._looks_female(person):
            return FamilyRole.PATERNAL_GRANDMOTHER
        return FamilyRole.PATERNAL_GRANDFATHER


class SubfamilyWriter(Protocol):
    """Persistence collaborator for assembled subfamilies."""

    def save_subfamily(self, subfamily: Subfamily) -> None: ...

    def add_member(self, member: FamilyMember) -> None: ...

    def update_suggestion_status(self, suggestion_id: str, status: SuggestionStatus) -> None: ...


def _relation_to_founders(
    member_id: str,
    person: Person | None,
    founder1: Person,
    founder2: Person,
) -> str:
    """Classify a member as 'founder', 'child', 'grandparent' or 'other'."""
    if member_id in (founder1.id, founder2.id):
        return "founder"
    founder_ids = (founder1.id, founder2.id)
    if person is not None and (person.father_id in founder_ids or person.mother_id in founder_ids):
        return "child"
    if member_id in (*founder1.parent_ids, *founder2.parent_ids):
        return "grandparent"
    return "other"


TREE_ELEMENTS = {
    "founder": TreeElement.TRUNK,
    "child": TreeElement.BRANCH,
    "grandparent": TreeElement.BARK,
    "other": TreeElement.OTHER,
}

GENERATIONS = {
    "founder": 0,
    "child": 1,
    "grandparent": -1,
    "other": 0,
}


def build_member_record(
    member_id: str,
    subfamily: Subfamily,
    graph: PersonGraph,
    role_inference: RoleInference,
) -> FamilyMember:
    """Derive role, tree element and generation for one member of a subfamily."""
    founder1 = graph.get(subfamily.founder_1_id)
    founder2 = graph.get(subfamily.founder_2_id)
    person = graph.get(member_id)
    relation = _relation_to_founders(member_id, person, founder1, founder2)

    if relation == "founder":
        role = FamilyRole.FATHER if member_id == founder1.id else FamilyRole.MOTHER
    elif relation == "child":
        role = role_inference.child_role(person)
    elif relation == "grandparent":
        role = role_inference.grandparent_role(person)
    else:
        role = FamilyRole.OTHER

    return FamilyMember(
        id=f"{member_id}_{subfamily.id}",
        member_id=member_id,
        subfamily_id=subfamily.id,
        role=role,
        tree_element=TREE_ELEMENTS[relation],
        generation=GENERATIONS[relation],
    )


def assemble_subfamily(
    suggestion: SubfamilySuggestion,
    population: Iterable[Person],
    custom_name: str | None = None,
    role_inference: RoleInference | None = None,
    writer: SubfamilyWriter | None = None,
    created_by: str = "",
) -> tuple[Subfamily, list[FamilyMember]]:
    """
    Create a subfamily from an accepted suggestion.

    Args:
        suggestion: The suggestion being accepted
        population: Snapshot used to resolve founders and member relations
        custom_name: Overrides the suggested name when given
        role_inference: Strategy for gendered child/grandparent roles
        writer: Optional persistence collaborator; member writes are
            best-effort and a failed write does not undo earlier ones
        created_by: User id recorded on the subfamily

    Returns:
        The subfamily and one member record per included id.

    Raises:
        FounderNotFoundError: if either founder is missing from the snapshot.
            Nothing is written in that case.
    """
    graph = population if isinstance(population, PersonGraph) else PersonGraph(population)
    role_inference = role_inference or NameLetterRoleInference()

    missing = [fid for fid in (suggestion.founder_1_id, suggestion.founder_2_id) if fid not in graph]
    if missing:
        logger.error(f"Cannot assemble subfamily from suggestion {suggestion.id}: founders missing {missing}")
        raise FounderNotFoundError(missing)

    subfamily = Subfamily(
        id=str(uuid.uuid4()),
        name=custom_name or suggestion.suggested_name,
        founder_1_id=suggestion.founder_1_id,
        founder_2_id=suggestion.founder_2_id,
        parent_family_id=suggestion.root_family_id,
        level=SUBFAMILY_LEVEL,
        active=True,
        created_by=created_by,
    )
    members = [
        build_member_record(member_id, subfamily, graph, role_inference)
        for member_id in suggestion.member_ids
    ]

    if writer is not None:
        writer.save_subfamily(subfamily)
        written = 0
        for member in members:
            try:
                writer.add_member(member)
                written += 1
            except Exception:
                logger.exception(f"Failed to write member {member.member_id} of subfamily {subfamily.id}, skipping")
        writer.update_suggestion_status(suggestion.id, SuggestionStatus.ACCEPTED)
        logger.info(f"Wrote subfamily '{subfamily.name}' with {written}/{len(members)} members")

    logger.info(f"Assembled subfamily '{subfamily.name}' ({subfamily.id}) with {len(members)} members")
    return subfamily, members
