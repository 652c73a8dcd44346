from .models import (
    Person,
    DuplicateTier,
    DuplicateMatch,
    ValidationResult,
    SuggestionStatus,
    SubfamilySuggestion,
    Subfamily,
    FamilyRole,
    TreeElement,
    FamilyMember,
    LayoutNode,
    LayoutResult,
)
from .errors import LineageError, NotFoundError, FounderNotFoundError
from .config import MatchingConfig, LayoutConfig, load_matching_config, load_layout_config
from .person_graph import PersonGraph
from .duplicates import find_duplicates, evaluate_duplicates, find_all_duplicate_pairs
from .subfamily_detection import detect_subfamily_candidates, find_confirmed_couples
from .subfamily_assembly import (
    assemble_subfamily,
    RoleInference,
    NameLetterRoleInference,
    SubfamilyWriter,
)
from .tree_layout import compute_layout
from .expansion import ExpansionState, DebouncedRunner

__all__ = [
    # Models
    "Person",
    "DuplicateTier",
    "DuplicateMatch",
    "ValidationResult",
    "SuggestionStatus",
    "SubfamilySuggestion",
    "Subfamily",
    "FamilyRole",
    "TreeElement",
    "FamilyMember",
    "LayoutNode",
    "LayoutResult",
    # Errors
    "LineageError",
    "NotFoundError",
    "FounderNotFoundError",
    # Configuration
    "MatchingConfig",
    "LayoutConfig",
    "load_matching_config",
    "load_layout_config",
    # Core operations
    "PersonGraph",
    "find_duplicates",
    "evaluate_duplicates",
    "find_all_duplicate_pairs",
    "detect_subfamily_candidates",
    "find_confirmed_couples",
    "assemble_subfamily",
    "RoleInference",
    "NameLetterRoleInference",
    "SubfamilyWriter",
    "compute_layout",
    # Tree view state
    "ExpansionState",
    "DebouncedRunner",
]
