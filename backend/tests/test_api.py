"""Tests for the FastAPI service."""

import pytest
from fastapi.testclient import TestClient

from lineage import SubfamilySuggestion
from main import app, store


SNAPSHOT = {
    "persons": [
        {"id": "gp1", "name": "Antonio Silva", "birth_date": "1930-05-01", "spouse_id": "gp2"},
        {"id": "gp2", "name": "Maria Silva", "birth_date": "1932-07-09", "spouse_id": "gp1"},
        {
            "id": "f1", "name": "Carlos Silva", "birth_date": "1958-02-14",
            "father_id": "gp1", "mother_id": "gp2", "spouse_id": "f2",
        },
        {"id": "f2", "name": "Beatriz Santos", "spouse_id": "f1"},
        {"id": "c1", "name": "Pedro Silva", "father_id": "f1", "mother_id": "f2"},
    ],
    "subfamilies": [],
}


@pytest.fixture
def client():
    store.clear()
    return TestClient(app)


@pytest.fixture
def loaded(client):
    response = client.post("/snapshot", json=SNAPSHOT)
    assert response.status_code == 200
    return client


class TestSnapshot:
    """Tests for loading data."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "snapshot_loaded": False}

    def test_requires_snapshot(self, client):
        assert client.get("/individuals").status_code == 400
        assert client.get("/layout/gp1").status_code == 400
        assert client.get("/subfamilies/suggestions").status_code == 400

    def test_load_snapshot(self, client):
        response = client.post("/snapshot", json=SNAPSHOT)
        assert response.json()["individual_count"] == 5
        assert response.json()["couple_count"] == 2
        assert len(client.get("/individuals").json()["individuals"]) == 5

    def test_upload_gedcom(self, client):
        content = (
            "0 HEAD\n"
            "0 @I1@ INDI\n1 NAME John /Smith/\n1 FAMS @F1@\n"
            "0 @I2@ INDI\n1 NAME Mary /Jones/\n1 FAMS @F1@\n"
            "0 @F1@ FAM\n1 HUSB @I1@\n1 WIFE @I2@\n"
            "0 TRLR\n"
        )
        response = client.post(
            "/upload-gedcom",
            files={"file": ("family.ged", content.encode("utf-8"), "text/plain")},
        )
        assert response.status_code == 200
        assert response.json()["individual_count"] == 2
        assert response.json()["couple_count"] == 1

    def test_upload_rejects_other_files(self, client):
        response = client.post("/upload-gedcom", files={"file": ("family.txt", b"x", "text/plain")})
        assert response.status_code == 400


class TestDuplicateEndpoint:
    """Tests for /duplicates/check."""

    def test_critical_duplicate(self, loaded):
        response = loaded.post("/duplicates/check", json={
            "candidate": {"id": "new", "name": "antonio  silva", "birth_date": "1930-05-01"},
        })
        body = response.json()
        assert response.status_code == 200
        assert body["has_duplicate"] is True
        assert body["tier"] == "critical"
        assert body["matches"][0]["matched"]["id"] == "gp1"

    def test_no_duplicate(self, loaded):
        response = loaded.post("/duplicates/check", json={
            "candidate": {"id": "new", "name": "Zzzz Yyyy", "birth_date": "1800-01-01"},
        })
        assert response.json()["has_duplicate"] is False

    def test_negative_tolerance_rejected(self, loaded):
        response = loaded.post("/duplicates/check", json={
            "candidate": {"id": "new", "name": "Ana"},
            "tolerance_days": -1,
        })
        assert response.status_code == 422


class TestSubfamilyEndpoints:
    """Tests for suggestion and assembly endpoints."""

    def test_suggest_and_assemble(self, loaded):
        suggestions = loaded.get("/subfamilies/suggestions", params={"root_family_id": "root"}).json()["suggestions"]
        assert len(suggestions) == 2
        target = next(s for s in suggestions if s["founder_1_id"] == "f1")

        response = loaded.post("/subfamilies/assemble", json={
            "suggestion_id": target["id"],
            "custom_name": "Os Silva",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["subfamily"]["name"] == "Os Silva"
        assert body["subfamily"]["parent_family_id"] == "root"
        assert len(body["members"]) == len(target["member_ids"])
        assert len(store.members) == len(target["member_ids"])

        again = loaded.post("/subfamilies/assemble", json={"suggestion_id": target["id"]})
        assert again.status_code == 409

    def test_repeated_detection_assembles_couple_once(self, loaded):
        first = loaded.get("/subfamilies/suggestions").json()["suggestions"]
        second = loaded.get("/subfamilies/suggestions").json()["suggestions"]
        assert {s["id"] for s in first} == {s["id"] for s in second}
        assert len(store.suggestions) == 2

        pick = lambda ss: next(s for s in ss if s["founder_1_id"] == "f1")
        assert loaded.post("/subfamilies/assemble", json={"suggestion_id": pick(first)["id"]}).status_code == 200
        assert loaded.post("/subfamilies/assemble", json={"suggestion_id": pick(second)["id"]}).status_code == 409

        founders = [{s.founder_1_id, s.founder_2_id} for s in store.subfamilies]
        assert founders.count({"f1", "f2"}) == 1

    def test_stale_suggestion_for_existing_subfamily_rejected(self, loaded):
        suggestion = loaded.get("/subfamilies/suggestions").json()["suggestions"][0]
        loaded.post("/subfamilies/assemble", json={"suggestion_id": suggestion["id"]})

        stale = SubfamilySuggestion(
            id="stale",
            founder_1_id=suggestion["founder_2_id"],
            founder_2_id=suggestion["founder_1_id"],
            suggested_name="Família Silva",
        )
        store.suggestions[stale.id] = stale
        response = loaded.post("/subfamilies/assemble", json={"suggestion_id": "stale"})
        assert response.status_code == 409
        assert len(store.subfamilies) == 1

    def test_unknown_suggestion(self, loaded):
        response = loaded.post("/subfamilies/assemble", json={"suggestion_id": "missing"})
        assert response.status_code == 404

    def test_assembled_couple_not_suggested_again(self, loaded):
        suggestions = loaded.get("/subfamilies/suggestions").json()["suggestions"]
        loaded.post("/subfamilies/assemble", json={"suggestion_id": suggestions[0]["id"]})
        assert len(loaded.get("/subfamilies/suggestions").json()["suggestions"]) == 1


class TestLayoutEndpoints:
    """Tests for layout and expansion toggles."""

    def test_collapsed_layout(self, loaded):
        response = loaded.get("/layout/gp1")
        assert response.status_code == 200
        assert [n["person_id"] for n in response.json()["nodes"]] == ["gp1"]

    def test_expand_and_layout(self, loaded):
        toggle = loaded.post("/layout/expanded/gp1")
        assert toggle.json() == {"person_id": "gp1", "enabled": True}
        loaded.post("/layout/spouse/gp1")

        body = loaded.get("/layout/gp1").json()
        nodes = {n["person_id"]: n for n in body["nodes"]}
        assert set(nodes) == {"gp1", "f1"}
        assert nodes["gp1"]["spouse_id"] == "gp2"
        assert body["total_height"] == 400

        assert loaded.post("/layout/expanded/gp1").json()["enabled"] is False

    def test_unknown_root(self, loaded):
        assert loaded.get("/layout/nobody").status_code == 404
