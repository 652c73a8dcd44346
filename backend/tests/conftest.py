"""Shared fixtures.

The sample family has three generations:

    Antonio Silva + Maria Silva      Jose Santos + Ana Santos
                 |                            |
           Carlos Silva   +   Beatriz Santos
                        |
              Pedro Silva, Julia Silva

Pedro is listed in Carlos's children; Julia only points at her parents.
Luis Lima claims Pedro as spouse, but Pedro does not reciprocate.
"""

import os
import sys
from datetime import date

import pytest

# Add backend to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lineage import Person


@pytest.fixture
def sample_people():
    return [
        Person(id="gp1", name="Antonio Silva", birth_date=date(1930, 5, 1), spouse_id="gp2"),
        Person(id="gp2", name="Maria Silva", birth_date=date(1932, 7, 9), spouse_id="gp1"),
        Person(id="gp3", name="Jose Santos", birth_date=date(1928, 1, 20), spouse_id="gp4"),
        Person(id="gp4", name="Ana Santos", birth_date=date(1931, 3, 3), spouse_id="gp3"),
        Person(
            id="f1", name="Carlos Silva", birth_date=date(1958, 2, 14),
            father_id="gp1", mother_id="gp2", spouse_id="f2", children_ids=("c1",),
        ),
        Person(
            id="f2", name="Beatriz Santos", birth_date=date(1960, 11, 30),
            father_id="gp3", mother_id="gp4", spouse_id="f1",
        ),
        Person(id="c1", name="Pedro Silva", birth_date=date(1985, 6, 5), father_id="f1", mother_id="f2"),
        Person(id="c2", name="Julia Silva", birth_date=date(1988, 9, 12), father_id="f1", mother_id="f2"),
        Person(id="x1", name="Luis Lima", spouse_id="c1"),
    ]
