"""Data models for people, duplicate checks, subfamilies and tree layout."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# People
# ============================================================================

class Person(BaseModel):
    """A person record from an immutable snapshot of the family tree."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    birth_date: date | None = None
    death_date: date | None = None
    birth_place: str | None = None
    father_id: str | None = None
    mother_id: str | None = None
    spouse_id: str | None = None
    children_ids: tuple[str, ...] = ()
    approved: bool = False
    generation_distance: int | None = None
    is_root_family: bool = False  # True only for the root couple

    @property
    def parent_ids(self) -> list[str]:
        """Known parent ids, father first."""
        return [pid for pid in (self.father_id, self.mother_id) if pid]


# ============================================================================
# Duplicate detection
# ============================================================================

class DuplicateTier(str, Enum):
    CRITICAL = "critical"  # blocks the save
    HIGH = "high"          # warns and asks for confirmation
    MEDIUM = "medium"      # warns, does not block


class DuplicateMatch(BaseModel):
    """An existing person that collides with the candidate."""
    candidate: Person
    matched: Person
    tier: DuplicateTier
    reasons: list[str] = []
    score: float = Field(ge=0.0, le=1.0)


class ValidationResult(BaseModel):
    """Outcome of a duplicate check for a single candidate."""
    has_duplicate: bool = False
    tier: DuplicateTier | None = None
    matches: list[DuplicateMatch] = []
    message: str | None = None

    @property
    def should_block(self) -> bool:
        return self.tier == DuplicateTier.CRITICAL

    @property
    def should_warn(self) -> bool:
        return self.tier in (DuplicateTier.HIGH, DuplicateTier.MEDIUM)


# ============================================================================
# Subfamilies
# ============================================================================

class SuggestionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"  # never suggested again
    EXPIRED = "expired"


class SubfamilySuggestion(BaseModel):
    """A detected couple that could found a new subfamily."""
    id: str
    founder_1_id: str
    founder_2_id: str
    suggested_name: str
    member_ids: list[str] = []
    status: SuggestionStatus = SuggestionStatus.PENDING
    root_family_id: str = ""


class Subfamily(BaseModel):
    id: str
    name: str
    founder_1_id: str
    founder_2_id: str
    parent_family_id: str = ""
    level: int = Field(default=1, ge=0)
    active: bool = True
    created_by: str = ""
    description: str | None = None


class FamilyRole(str, Enum):
    FATHER = "father"
    MOTHER = "mother"
    SON = "son"
    DAUGHTER = "daughter"
    PATERNAL_GRANDFATHER = "paternal_grandfather"
    PATERNAL_GRANDMOTHER = "paternal_grandmother"
    OTHER = "other"


class TreeElement(str, Enum):
    """Presentation-only tag for a member inside a subfamily."""
    TRUNK = "trunk"    # founders
    BRANCH = "branch"  # children
    BARK = "bark"      # grandparents
    OTHER = "other"


class FamilyMember(BaseModel):
    """Role of one person inside one subfamily."""
    id: str
    member_id: str
    subfamily_id: str
    role: FamilyRole
    tree_element: TreeElement
    generation: int = 0  # relative to the founders

    @property
    def is_founder(self) -> bool:
        return self.role in (FamilyRole.FATHER, FamilyRole.MOTHER)


# ============================================================================
# Layout
# ============================================================================

class LayoutNode(BaseModel):
    """A visible node with its center position and subtree extent."""
    person_id: str
    spouse_id: str | None = None
    level: int
    x: float
    y: float
    width: float
    children_ids: list[str] = []
    is_expanded: bool = False

    @property
    def left_edge(self) -> float:
        return self.x - self.width / 2

    @property
    def right_edge(self) -> float:
        return self.x + self.width / 2


class LayoutResult(BaseModel):
    nodes: list[LayoutNode] = []
    total_width: float = 0.0
    total_height: float = 0.0
