"""Build a Person snapshot from a GEDCOM file."""

import logging
import os
import tempfile
from datetime import date, datetime

from gedcom.element.family import FamilyElement
from gedcom.element.individual import IndividualElement
from gedcom.parser import Parser

from .models import Person

logger = logging.getLogger("lineage.gedcom_import")


def parse_gedcom_file(file_path: str) -> Parser:
    parser = Parser()
    parser.parse_file(file_path, strict=False)
    return parser


def parse_gedcom_content(content: str) -> Parser:
    """Parse GEDCOM content from a string."""
    # Write content to temp file (python-gedcom requires file path)
    with tempfile.NamedTemporaryFile(mode='w', suffix='.ged', delete=False, encoding='utf-8') as f:
        f.write(content)
        temp_path = f.name

    try:
        return parse_gedcom_file(temp_path)
    finally:
        os.unlink(temp_path)


def parse_gedcom_date(date_str: str | None) -> date | None:
    """Convert an exact GEDCOM date like "15 MAR 1850" to a date.

    Partial or approximate dates ("MAR 1850", "ABT 1850") give None.
    """
    if not date_str:
        return None
    try:
        return datetime.strptime(date_str.strip(), "%d %b %Y").date()
    except ValueError:
        logger.debug(f"Ignoring inexact GEDCOM date: '{date_str}'")
        return None


def _strip_pointer(pointer: str) -> str:
    return pointer.strip('@')


def _family_members(parser: Parser, family: FamilyElement, member_type: str) -> list[IndividualElement]:
    return [
        member for member in parser.get_family_members(family, member_type)
        if isinstance(member, IndividualElement)
    ]


def _first_pointer(members: list[IndividualElement]) -> str | None:
    return _strip_pointer(members[0].get_pointer()) if members else None


def individual_to_person(parser: Parser, individual: IndividualElement) -> Person:
    """Map one INDI record, with its FAMC/FAMS links, to a Person."""
    pointer = individual.get_pointer()
    first_name, last_name = individual.get_name()

    birth_data = individual.get_birth_data()
    death_data = individual.get_death_data()

    father_id = mother_id = None
    for family in parser.get_families(individual, "FAMC"):
        father_id = father_id or _first_pointer(_family_members(parser, family, "HUSB"))
        mother_id = mother_id or _first_pointer(_family_members(parser, family, "WIFE"))

    spouse_id = None
    children: dict[str, None] = {}
    for family in parser.get_families(individual, "FAMS"):
        for partner in _family_members(parser, family, "PARENTS"):
            if partner.get_pointer() != pointer:
                spouse_id = _strip_pointer(partner.get_pointer())  # latest family wins
        for child in _family_members(parser, family, "CHIL"):
            children[_strip_pointer(child.get_pointer())] = None

    return Person(
        id=_strip_pointer(pointer),
        name=f"{first_name} {last_name}".strip(),
        birth_date=parse_gedcom_date(birth_data[0]) if birth_data else None,
        death_date=parse_gedcom_date(death_data[0]) if death_data else None,
        birth_place=(birth_data[1] or None) if birth_data and len(birth_data) > 1 else None,
        father_id=father_id,
        mother_id=mother_id,
        spouse_id=spouse_id,
        children_ids=tuple(children),
    )


def people_from_gedcom(parser: Parser) -> list[Person]:
    """Get every individual in the GEDCOM file as a Person."""
    people = [
        individual_to_person(parser, element)
        for element in parser.get_root_child_elements()
        if isinstance(element, IndividualElement)
    ]
    logger.info(f"Imported {len(people)} people from GEDCOM")
    return people
