"""Front Matter — pure rendering and parsing of the Markdown record format.

Invariants:
    - ADR front matter keys: id, title, date, status, quadrant, ring, blip
    - Blip front matter keys: id, title, date, quadrant, ring, tag, hasAdr, adrId
    - Key names and casing never change (files are the long-lived record)
    - document_filename() is a pure function of (date, id, title); the id keeps
      titles that slug alike ("C", "C#", "C++") in separate files

Design Decisions:
    - yaml.safe_dump with sort_keys=False: key order is stable and reviewable in diffs
    - Pure string functions, no IO: the infrastructure writer owns the filesystem
"""

import re
from typing import Mapping

import yaml

from adr_radar.core.domain_types import EntryKind


ADR_FRONT_MATTER_KEYS: tuple[str, ...] = (
    "id", "title", "date", "status", "quadrant", "ring", "blip",
)
BLIP_FRONT_MATTER_KEYS: tuple[str, ...] = (
    "id", "title", "date", "quadrant", "ring", "tag", "hasAdr", "adrId",
)
DOCUMENT_SUFFIX = ".md"

_PLACEHOLDERS = {
    "context": (
        "[Describe the context and problem statement in two or three sentences.]"
    ),
    "decision": "[Describe the decision that was made.]",
    "consequences": (
        "[Describe the resulting context after applying the decision, "
        "positive, negative and neutral.]"
    ),
    "references": "[Links to related ADRs, tickets or documentation.]",
}

_SLUG_INVALID = re.compile(r"[^a-z0-9._-]+")
_SLUG_DASHES = re.compile(r"-{2,}")


def slugify(title: str) -> str:
    """Lowercase, spaces to dashes, everything unsafe for a filename dropped."""
    slug = title.strip().lower().replace(" ", "-")
    slug = _SLUG_DASHES.sub("-", _SLUG_INVALID.sub("", slug))
    return slug.strip("-.") or "untitled"


def document_filename(date: str, record_id: object, title: str) -> str:
    return f"{date[:10]}-{record_id}-{slugify(title)}{DOCUMENT_SUFFIX}"


def _front_matter_block(fields: Mapping[str, object], keys: tuple[str, ...]) -> str:
    header = {key: fields.get(key) for key in keys}
    body = yaml.safe_dump(
        header, sort_keys=False, allow_unicode=True, default_flow_style=False,
    )
    return f"---\n{body}---\n"


def render_adr_document(fields: Mapping[str, object]) -> str:
    """Render an ADR: front matter, title heading, four body sections."""
    lines = [_front_matter_block(fields, ADR_FRONT_MATTER_KEYS), f"# {fields['title']}", ""]
    for section in ("context", "decision", "consequences", "references"):
        text = str(fields.get(section) or "").strip() or _PLACEHOLDERS[section]
        lines += [f"## {section.capitalize()}", "", text, ""]
    return "\n".join(lines)


def render_blip_document(fields: Mapping[str, object]) -> str:
    """Render a blip: front matter plus a short human-readable summary."""
    description = str(fields.get("description") or "").strip()
    lines = [
        _front_matter_block(fields, BLIP_FRONT_MATTER_KEYS),
        f"# {fields['title']}",
        "",
        f"**Ring**: {fields.get('ring') or '(none)'}",
        f"**Quadrant**: {fields.get('quadrant') or '(none)'}",
        f"**Has ADR**: {'yes' if fields.get('hasAdr') else 'no'}",
    ]
    if fields.get("author"):
        lines.append(f"**Author**: {fields['author']}")
    lines += ["", description or "_No description yet._", ""]
    return "\n".join(lines)


def render_document(kind: EntryKind, fields: Mapping[str, object]) -> str:
    if kind == EntryKind.ADR:
        return render_adr_document(fields)
    return render_blip_document(fields)


def parse_front_matter(text: str) -> dict:
    """Return the YAML header of a document, or {} when there is none."""
    if not text.startswith("---\n"):
        return {}
    end = text.find("\n---", 4)
    if end == -1:
        return {}
    try:
        data = yaml.safe_load(text[4:end])
    except yaml.YAMLError:
        return {}
    return data if isinstance(data, dict) else {}


def document_body(text: str) -> str:
    """Everything after the front matter block (the whole text when there is none)."""
    if not text.startswith("---\n"):
        return text
    end = text.find("\n---\n", 4)
    if end == -1:
        return text
    return text[end + len("\n---\n"):]


def replace_adr_front_matter(existing: str, fields: Mapping[str, object]) -> str:
    """Re-render the header of an existing ADR, keeping its hand-edited body.

    The first level-one heading is replaced so a renamed ADR does not keep
    its old title in the body.
    """
    body = document_body(existing)
    lines = body.split("\n")
    for i, line in enumerate(lines):
        if line.startswith("# "):
            lines[i] = f"# {fields['title']}"
            break
    else:
        lines = [f"# {fields['title']}", ""] + lines
    return _front_matter_block(fields, ADR_FRONT_MATTER_KEYS) + "\n".join(lines)
