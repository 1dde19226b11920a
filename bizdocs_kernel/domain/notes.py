"""
Notes -- tagged representation of a document's notes.

A document either carries free text or a bag of template-field values.
The choice is made once, when the document is written, rather than by
trying to parse the text every time it is displayed.

Legacy data stored both shapes in one string: a JSON object of the form
``{"fields": {"<field id>": <value>, ...}}`` for template values, anything
else for free text. ``notes_from_legacy`` and ``serialize_notes`` convert
at that boundary.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union


@dataclass(frozen=True)
class FreeTextNotes:
    """Plain notes shown verbatim under a NOTES heading."""

    text: str


@dataclass(frozen=True)
class StructuredNotes:
    """Template-field values keyed by field id."""

    fields: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned = {
            str(k): _stringify(v) for k, v in dict(self.fields).items() if v is not None
        }
        object.__setattr__(self, "fields", MappingProxyType(cleaned))

    def value_for(self, field_id: str) -> str | None:
        """Stored value for a field, or None when absent or blank."""
        value = self.fields.get(field_id)
        if value is None or not value.strip():
            return None
        return value

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.fields.items())))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructuredNotes):
            return NotImplemented
        return dict(self.fields) == dict(other.fields)


Notes = Union[FreeTextNotes, StructuredNotes]


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def notes_from_legacy(raw: str | None) -> Notes | None:
    """
    Decide the notes variant for a legacy single-string value.

    Returns:
        None for missing/blank input, StructuredNotes when ``raw`` is a JSON
        object with a ``fields`` object, FreeTextNotes otherwise (malformed
        JSON included).
    """
    if raw is None or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return FreeTextNotes(raw)
    if isinstance(data, dict) and isinstance(data.get("fields"), dict):
        return StructuredNotes(data["fields"])
    return FreeTextNotes(raw)


def serialize_notes(notes: Notes | None) -> str | None:
    """Inverse of ``notes_from_legacy`` for the persistence layer."""
    if notes is None:
        return None
    if isinstance(notes, FreeTextNotes):
        return notes.text
    return json.dumps({"fields": dict(notes.fields)}, sort_keys=True)
