"""Markdown Document Writer — the file half of the dual write.

Invariants:
    - write_document() is idempotent for the same (kind, fields): same path, same bytes
    - Target directories are created on demand
    - Any OSError surfaces as DocumentWriteError carrying the target path
    - A rename (previous_title differs from title) removes the old file only after
      the new one is written, and only when its front matter carries the same id
    - File names embed the record id, so two records never share a path
    - Editing an ADR without section text keeps the existing document body

Design Decisions:
    - Rendering lives in core.front_matter (pure); this class only owns paths and IO
    - Directories are mutable at runtime: the Settings screen re-points them without
      rebuilding the protocol
"""

import logging
from pathlib import Path
from typing import Mapping

from adr_radar.core.domain_types import EntryKind
from adr_radar.core.errors import DocumentWriteError, ErrorContext
from adr_radar.core.front_matter import (
    document_filename, parse_front_matter, render_document, replace_adr_front_matter,
)

logger = logging.getLogger(__name__)

_SECTIONS = ("context", "decision", "consequences", "references")


class MarkdownDocumentWriter:
    """Writes one Markdown file per record under the ADR or blip directory."""

    def __init__(self, adr_dir: str | Path, blip_dir: str | Path, author: str = ""):
        self.adr_dir = Path(adr_dir)
        self.blip_dir = Path(blip_dir)
        self.author = author

    def set_directories(
        self, adr_dir: str | Path | None = None, blip_dir: str | Path | None = None,
    ) -> None:
        if adr_dir:
            self.adr_dir = Path(adr_dir)
        if blip_dir:
            self.blip_dir = Path(blip_dir)
        logger.info(f"Document directories: adrs={self.adr_dir} blips={self.blip_dir}")

    def directory_for(self, kind: EntryKind) -> Path:
        return self.adr_dir if kind == EntryKind.ADR else self.blip_dir

    def path_for(
        self, kind: EntryKind, date: str, title: str, record_id: object,
    ) -> Path:
        return self.directory_for(kind) / document_filename(date, record_id, title)

    def write_document(
        self,
        kind: EntryKind,
        fields: Mapping[str, object],
        previous_title: str | None = None,
    ) -> Path:
        """Render and write the record's document, returning its path."""
        date, record_id = str(fields["date"]), fields["id"]
        path = self.path_for(kind, date, str(fields["title"]), record_id)
        old_path = None
        if previous_title and previous_title != fields["title"]:
            candidate = self.path_for(kind, date, previous_title, record_id)
            if candidate != path:
                old_path = candidate

        fields = dict(fields)
        if kind == EntryKind.BLIP and self.author and not fields.get("author"):
            fields["author"] = self.author

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            content = self._content(kind, fields, path, old_path)
            path.write_text(content, encoding="utf-8")
            if old_path is not None and self._owned_by(old_path, record_id):
                old_path.unlink()
        except OSError as e:
            logger.error(
                f"Document write failed: {e}",
                extra={"path": str(path), "error_code": "IO_ERROR"},
            )
            raise DocumentWriteError(
                str(path), e.strerror or str(e), ErrorContext(path=str(path)),
            )

        logger.info(f"Wrote {kind.value} document", extra={"path": str(path)})
        return path

    @staticmethod
    def _owned_by(path: Path, record_id: object) -> bool:
        """True when the file exists and its front matter names this record."""
        if not path.exists():
            return False
        owner = parse_front_matter(path.read_text(encoding="utf-8")).get("id")
        if owner != record_id:
            logger.warning(
                f"Left {path.name} in place: it belongs to record {owner}",
                extra={"path": str(path)},
            )
            return False
        return True

    def _content(
        self,
        kind: EntryKind,
        fields: Mapping[str, object],
        path: Path,
        old_path: Path | None,
    ) -> str:
        has_sections = any(str(fields.get(s) or "").strip() for s in _SECTIONS)
        if kind == EntryKind.ADR and not has_sections:
            for candidate in (old_path, path):
                if candidate is not None and self._owned_by(candidate, fields["id"]):
                    existing = candidate.read_text(encoding="utf-8")
                    return replace_adr_front_matter(existing, fields)
        return render_document(kind, fields)
