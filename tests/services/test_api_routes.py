"""Snapshot API — health probes, reads and creates over the Sync Protocol.

Tests:
    - Liveness always 200; readiness needs the database and writable document dirs
    - POST /blips: 201 with the document path; duplicate name is 409 DUPLICATE_NAME
    - POST /adrs for a missing blip: 201 ORPHAN_ADR with a warning
    - Blank names and unknown enum values are 400 VALIDATION_ERROR
    - GET /blips/{id} for a missing row is 404
    - /radar plots classified blips only and reports the sweep angle at t
    - /stats summarizes counts and coverage
"""

import math

import pytest

import adr_radar.infrastructure.database as db_module
from adr_radar.core.radar_geometry import sweep_angle


async def _post_blip(client, name="Rust", quadrant="languages", ring="adopt"):
    body = {"name": name}
    if quadrant:
        body["quadrant"] = quadrant
    if ring:
        body["ring"] = ring
    return await client.post("/api/v1/blips", json=body)


# ─── Health ──────────────────────────────────────────────────────

async def test_health_is_always_ok(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_ready_with_database(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"] == {"database": "ok", "adr_dir": "ok", "blip_dir": "ok"}


async def test_ready_without_database_is_503(client, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["failing"] == ["database"]


async def test_ready_with_unwritable_adr_dir_is_503(client, writer, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    writer.set_directories(adr_dir=blocker / "adrs")

    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json()["failing"] == ["adr_dir"]


# ─── Blips ───────────────────────────────────────────────────────

async def test_create_blip_returns_201_and_writes_document(client, blip_dir):
    res = await _post_blip(client)
    assert res.status_code == 201
    body = res.json()
    assert body["outcome"] == "created"
    assert body["kind"] == "blip"
    assert body["warning"] is None
    assert [p.name for p in blip_dir.glob("*.md")] == [body["file_path"].rsplit("/", 1)[-1]]


async def test_duplicate_blip_is_409(client):
    await _post_blip(client)
    res = await _post_blip(client, ring="hold")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_NAME"

    listed = await client.get("/api/v1/blips")
    assert [b["name"] for b in listed.json()] == ["Rust"]


@pytest.mark.parametrize("body", [
    {"name": "   "},
    {"name": ""},
    {"name": "Rust", "quadrant": "databases"},
    {"name": "Rust", "ring": "maybe"},
])
async def test_invalid_blip_is_400(client, body):
    res = await client.post("/api/v1/blips", json=body)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_get_blip_by_id(client):
    created = (await _post_blip(client)).json()
    res = await client.get(f"/api/v1/blips/{created['record_id']}")
    assert res.status_code == 200
    assert res.json()["quadrant"] == "languages"
    assert res.json()["has_adr"] is False


async def test_missing_blip_is_404(client):
    res = await client.get("/api/v1/blips/999")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


# ─── ADRs ────────────────────────────────────────────────────────

async def test_create_adr_links_existing_blip(client):
    blip = (await _post_blip(client)).json()
    res = await client.post("/api/v1/adrs", json={
        "title": "Adopt Rust", "blip_name": "Rust", "status": "accepted",
        "decision": "Use Rust for the ingest service.",
    })
    assert res.status_code == 201
    assert res.json()["linked_blip_id"] == blip["record_id"]

    linked = (await client.get(f"/api/v1/blips/{blip['record_id']}")).json()
    assert linked["has_adr"] is True
    assert linked["adr_id"] == res.json()["record_id"]


async def test_orphan_adr_is_201_with_warning(client, adr_dir):
    res = await client.post("/api/v1/adrs", json={
        "title": "Use Zig", "blip_name": "Nonexistent",
    })
    assert res.status_code == 201
    body = res.json()
    assert body["outcome"] == "orphan_adr"
    assert "Nonexistent" in body["warning"]
    assert len(list(adr_dir.glob("*.md"))) == 1

    adrs = (await client.get("/api/v1/adrs")).json()
    assert [(a["title"], a["status"]) for a in adrs] == [("Use Zig", "proposed")]


async def test_adr_with_unknown_status_is_400(client):
    res = await client.post("/api/v1/adrs", json={
        "title": "Adopt Rust", "blip_name": "Rust", "status": "maybe",
    })
    assert res.status_code == 400


# ─── Radar & Stats ───────────────────────────────────────────────

async def test_radar_frame_plots_classified_blips(client):
    await _post_blip(client, "Rust")
    await _post_blip(client, "Kubernetes", quadrant="platforms", ring="trial")
    await _post_blip(client, "Unsorted", quadrant=None, ring=None)

    res = await client.get("/api/v1/radar", params={"t": 1.0})
    assert res.status_code == 200
    body = res.json()
    assert body["period_seconds"] == 4.0
    assert math.isclose(body["sweep_angle"], sweep_angle(1.0, 4.0))
    assert sorted(p["name"] for p in body["points"]) == ["Kubernetes", "Rust"]
    assert body["unplotted"] == ["Unsorted"]
    for point in body["points"]:
        assert math.hypot(point["x"], point["y"]) <= 1.0


async def test_radar_rejects_negative_time(client):
    res = await client.get("/api/v1/radar", params={"t": -1})
    assert res.status_code == 400


async def test_stats_summarize_coverage(client):
    await _post_blip(client, "Rust")
    await _post_blip(client, "Go", ring="trial")
    await client.post("/api/v1/adrs", json={"title": "Adopt Rust", "blip_name": "Rust"})

    stats = (await client.get("/api/v1/stats")).json()
    assert stats["total_blips"] == 2
    assert stats["total_adrs"] == 1
    assert stats["linked_blips"] == 1
    assert stats["coverage"] == 50.0
