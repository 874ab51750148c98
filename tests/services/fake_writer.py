"""Fake collaborators for Sync Protocol tests.

FailingWriter simulates a read-only filesystem for selected entry kinds;
fixed_clock pins created dates and ADR timestamps.
"""

from adr_radar.core.domain_types import EntryKind
from adr_radar.core.errors import DocumentWriteError
from adr_radar.infrastructure.document_writer import MarkdownDocumentWriter

TODAY = "2026-03-02"


def fixed_clock() -> str:
    return TODAY


class FailingWriter(MarkdownDocumentWriter):
    """Writer whose filesystem refuses every write for the configured kinds."""

    def __init__(self, adr_dir, blip_dir, failing=(EntryKind.ADR, EntryKind.BLIP)):
        super().__init__(adr_dir, blip_dir)
        self.failing = set(failing)
        self.attempts = 0

    def write_document(self, kind, fields, previous_title=None):
        self.attempts += 1
        if kind in self.failing:
            path = self.path_for(
                kind, str(fields["date"]), str(fields["title"]), fields["id"],
            )
            raise DocumentWriteError(str(path), "Read-only file system")
        return super().write_document(kind, fields, previous_title)
