"""Lineage - genealogical graph service.

FastAPI server exposing duplicate checks, subfamily detection and tree
layout over an in-memory snapshot of the family tree.
"""

import logging
import os

# Configure logging
logging.basicConfig(
    level=os.getenv("LINEAGE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("lineage")

from fastapi import FastAPI, HTTPException, UploadFile, File, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from lineage import (
    ExpansionState,
    FamilyMember,
    NotFoundError,
    Person,
    PersonGraph,
    Subfamily,
    SubfamilySuggestion,
    SuggestionStatus,
    ValidationResult,
    LayoutResult,
    assemble_subfamily,
    compute_layout,
    detect_subfamily_candidates,
    find_duplicates,
)
from lineage.gedcom_import import parse_gedcom_content, people_from_gedcom
from lineage.subfamily_detection import subfamily_exists

# Load environment variables
load_dotenv()


class InMemoryStore:
    """Holds the current snapshot and everything derived from it."""

    def __init__(self):
        self.clear()

    def clear(self) -> None:
        self.graph: PersonGraph | None = None
        self.subfamilies: list[Subfamily] = []
        self.members: list[FamilyMember] = []
        self.suggestions: dict[str, SubfamilySuggestion] = {}
        self.expansion = ExpansionState()

    def load(self, people: list[Person], subfamilies: list[Subfamily] | None = None) -> None:
        self.graph = PersonGraph(people)
        self.subfamilies = list(subfamilies or [])
        self.members = []
        self.suggestions = {}
        self.expansion.collapse_all()

    # SubfamilyWriter
    def save_subfamily(self, subfamily: Subfamily) -> None:
        self.subfamilies.append(subfamily)

    def add_member(self, member: FamilyMember) -> None:
        self.members.append(member)

    def update_suggestion_status(self, suggestion_id: str, status: SuggestionStatus) -> None:
        suggestion = self.suggestions.get(suggestion_id)
        if suggestion is not None:
            self.suggestions[suggestion_id] = suggestion.model_copy(update={"status": status})


# Global state
store = InMemoryStore()


# Create FastAPI app
app = FastAPI(
    title="Lineage",
    description="Duplicate detection, subfamily discovery and tree layout for genealogical records",
    version="1.0.0",
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip()
        for o in os.getenv("LINEAGE_CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
        if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class SnapshotRequest(BaseModel):
    """A full snapshot of people and existing subfamilies."""
    persons: list[Person]
    subfamilies: list[Subfamily] = []


class SnapshotResponse(BaseModel):
    message: str
    individual_count: int
    couple_count: int


class DuplicateCheckRequest(BaseModel):
    candidate: Person
    tolerance_days: int = Field(default=0, ge=0)


class AssembleRequest(BaseModel):
    suggestion_id: str
    custom_name: str | None = None
    created_by: str = ""


class AssembleResponse(BaseModel):
    subfamily: Subfamily
    members: list[FamilyMember]


class ToggleResponse(BaseModel):
    person_id: str
    enabled: bool


def _require_snapshot() -> PersonGraph:
    if store.graph is None:
        logger.warning("Request received without a loaded snapshot")
        raise HTTPException(status_code=400, detail="No family tree loaded. Upload a snapshot first.")
    return store.graph


# Endpoints

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    logger.debug("Health check requested")
    return {
        "status": "healthy",
        "snapshot_loaded": store.graph is not None,
    }


@app.post("/snapshot", response_model=SnapshotResponse)
async def load_snapshot(request: SnapshotRequest):
    """Replace the in-memory snapshot with the given records."""
    store.load(request.persons, request.subfamilies)
    logger.info(f"Loaded snapshot with {len(store.graph)} people and {len(store.subfamilies)} subfamilies")
    return SnapshotResponse(
        message="Snapshot loaded",
        individual_count=len(store.graph),
        couple_count=len(store.graph.confirmed_couples),
    )


@app.post("/upload-gedcom", response_model=SnapshotResponse)
async def upload_gedcom(file: UploadFile = File(...)):
    """Upload a GEDCOM file and use it as the snapshot."""
    logger.info(f"Received GEDCOM file upload: {file.filename}")

    if not file.filename.endswith(('.ged', '.gedcom')):
        logger.warning(f"Invalid file type: {file.filename}")
        raise HTTPException(status_code=400, detail="File must be a GEDCOM file (.ged or .gedcom)")

    content = await file.read()
    try:
        content_str = content.decode('utf-8')
    except UnicodeDecodeError:
        logger.info("UTF-8 decode failed, trying latin-1 encoding")
        content_str = content.decode('latin-1')

    try:
        people = people_from_gedcom(parse_gedcom_content(content_str))
    except Exception as e:
        logger.error(f"Failed to parse GEDCOM file: {str(e)}")
        raise HTTPException(status_code=400, detail=f"Failed to parse GEDCOM file: {str(e)}")

    store.load(people)
    return SnapshotResponse(
        message=f"Successfully parsed GEDCOM file: {file.filename}",
        individual_count=len(store.graph),
        couple_count=len(store.graph.confirmed_couples),
    )


@app.get("/individuals")
async def get_individuals():
    """Get all people in the current snapshot."""
    graph = _require_snapshot()
    logger.info(f"Returning {len(graph)} individuals")
    return {"individuals": graph.people}


@app.post("/duplicates/check", response_model=ValidationResult)
async def check_duplicates(request: DuplicateCheckRequest):
    """Check a person about to be saved against the snapshot."""
    graph = _require_snapshot()
    logger.info(f"Duplicate check for '{request.candidate.name}' (tolerance {request.tolerance_days} days)")
    return find_duplicates(request.candidate, graph, request.tolerance_days)


@app.get("/subfamilies/suggestions")
async def get_subfamily_suggestions(root_family_id: str = Query(default="")):
    """Detect couples that could found a new subfamily."""
    graph = _require_snapshot()
    detected = detect_subfamily_candidates(graph, store.subfamilies, root_family_id)

    # Reuse the pending suggestion already issued for a couple so ids stay stable
    pending = {
        frozenset((s.founder_1_id, s.founder_2_id)): s
        for s in store.suggestions.values()
        if s.status == SuggestionStatus.PENDING
    }
    suggestions = []
    for suggestion in detected:
        existing = pending.get(frozenset((suggestion.founder_1_id, suggestion.founder_2_id)))
        if existing is not None:
            suggestion = suggestion.model_copy(update={"id": existing.id})
        store.suggestions[suggestion.id] = suggestion
        suggestions.append(suggestion)
    return {"suggestions": suggestions}


@app.post("/subfamilies/assemble", response_model=AssembleResponse)
async def assemble(request: AssembleRequest):
    """Accept a suggestion and create its subfamily."""
    graph = _require_snapshot()
    suggestion = store.suggestions.get(request.suggestion_id)
    if suggestion is None:
        raise HTTPException(status_code=404, detail=f"Suggestion {request.suggestion_id} not found")
    if suggestion.status != SuggestionStatus.PENDING:
        raise HTTPException(status_code=409, detail=f"Suggestion is already {suggestion.status.value}")
    if subfamily_exists(store.subfamilies, suggestion.founder_1_id, suggestion.founder_2_id):
        logger.warning(
            f"Rejected suggestion {suggestion.id}: subfamily for "
            f"{suggestion.founder_1_id}/{suggestion.founder_2_id} already exists"
        )
        raise HTTPException(status_code=409, detail="A subfamily already exists for these founders")

    try:
        subfamily, members = assemble_subfamily(
            suggestion,
            graph,
            custom_name=request.custom_name,
            writer=store,
            created_by=request.created_by,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return AssembleResponse(subfamily=subfamily, members=members)


@app.get("/layout/{root_id}", response_model=LayoutResult)
async def get_layout(root_id: str):
    """Lay out the tree under root_id using the current expansion state."""
    graph = _require_snapshot()
    if root_id not in graph:
        raise HTTPException(status_code=404, detail=f"Person with ID {root_id} not found")
    expanded, spouse_visible = store.expansion.snapshot()
    return compute_layout(graph, root_id, expanded, spouse_visible)


@app.post("/layout/expanded/{person_id}", response_model=ToggleResponse)
async def toggle_expanded(person_id: str):
    """Show or hide a node's children."""
    _require_snapshot()
    enabled = store.expansion.toggle_expanded(person_id)
    logger.debug(f"Expansion of {person_id} -> {enabled}")
    return ToggleResponse(person_id=person_id, enabled=enabled)


@app.post("/layout/spouse/{person_id}", response_model=ToggleResponse)
async def toggle_spouse(person_id: str):
    """Show or hide a node's spouse."""
    _require_snapshot()
    enabled = store.expansion.toggle_spouse(person_id)
    logger.debug(f"Spouse visibility of {person_id} -> {enabled}")
    return ToggleResponse(person_id=person_id, enabled=enabled)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("LINEAGE_HOST", "0.0.0.0"), port=int(os.getenv("LINEAGE_PORT", "8000")))
