"""Radar schemas — request validation and conversion to Sync Protocol drafts.

Invariants:
    - Names and titles are stripped; whitespace-only values are rejected
    - Empty optional text becomes None on the draft
    - SyncResponse.warning joins the error message with any extra warnings
"""

import pytest
from pydantic import ValidationError

from adr_radar.core.domain_types import EntryKind, Quadrant, Ring, SyncOutcome
from adr_radar.core.errors import OrphanAdrError, PartialWriteError
from adr_radar.core.records import SyncResult
from adr_radar.schemas.radar import AdrCreate, BlipCreate, SyncResponse


# --- BlipCreate ---------------------------------------------------------------

def test_blip_create_strips_name():
    body = BlipCreate(name="  Rust  ", quadrant="languages", ring="adopt")
    draft = body.to_draft()
    assert draft.name == "Rust"
    assert draft.quadrant == Quadrant.LANGUAGES
    assert draft.ring == Ring.ADOPT


def test_blip_create_rejects_whitespace_name():
    with pytest.raises(ValidationError):
        BlipCreate(name="   ")


def test_blip_create_empty_tag_becomes_none():
    draft = BlipCreate(name="Rust", tag="", description="").to_draft()
    assert draft.tag is None
    assert draft.description is None


def test_blip_create_name_max_length_enforced():
    with pytest.raises(ValidationError):
        BlipCreate(name="x" * 201)


# --- AdrCreate ----------------------------------------------------------------

def test_adr_create_defaults_to_proposed():
    draft = AdrCreate(title="Adopt Rust", blip_name="Rust").to_draft()
    assert draft.status == "proposed"
    assert draft.context == ""


def test_adr_create_rejects_blank_blip_name():
    with pytest.raises(ValidationError):
        AdrCreate(title="Adopt Rust", blip_name=" ")


# --- SyncResponse -------------------------------------------------------------

def test_sync_response_clean_result_has_no_warning():
    result = SyncResult(
        SyncOutcome.CREATED, EntryKind.BLIP, "Rust", record_id=1,
        file_path="blips/2026-03-02-1-rust.md",
    )
    resp = SyncResponse.from_result(result)
    assert resp.outcome == "created"
    assert resp.warning is None


def test_sync_response_partial_write_carries_orphan_warning():
    orphan = OrphanAdrError("Zig")
    result = SyncResult(
        SyncOutcome.PARTIAL_WRITE, EntryKind.ADR, "Use Zig", record_id=3,
        error=PartialWriteError("Read-only file system"),
        warnings=(orphan.message,),
    )
    resp = SyncResponse.from_result(result)
    assert resp.outcome == "partial_write"
    assert "Read-only file system" in resp.warning
    assert "Zig" in resp.warning
