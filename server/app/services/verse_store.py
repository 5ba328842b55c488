"""
Verse Store.

Holds the Rigveda corpus in memory. The corpus is read once from a JSON
array at startup and never modified afterwards; every query below is a
linear scan over the records in load order.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from app.core.errors import ClientInputError, NotFoundError, StartupError

logger = logging.getLogger(__name__)

Locator = Union[int, str]


class VerseRecord(BaseModel):
    """One verse of the corpus. Unknown fields from the file are kept."""

    model_config = ConfigDict(frozen=True, extra="allow")

    mandala: Locator
    hymn: Locator
    verse: Locator
    sanskrit: Optional[str] = None
    translation: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    deities: List[str] = Field(default_factory=list)
    themes: List[str] = Field(default_factory=list)

    @field_validator("keywords", "deities", "themes", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value

    def as_json(self) -> dict:
        """The record as read from the file, without filled-in defaults."""
        present = set(self.model_fields_set) | set(self.model_extra or {})
        return {k: v for k, v in self.model_dump(mode="json").items() if k in present}

    @property
    def reference(self) -> str:
        return f"Rig {self.mandala}.{self.hymn}.{self.verse}"

    def matches_locator(self, mandala, hymn, verse) -> bool:
        return (
            str(self.mandala) == str(mandala)
            and str(self.hymn) == str(hymn)
            and str(self.verse) == str(verse)
        )


def _any_equal(values: List[str], wanted: str) -> bool:
    return any(v.lower() == wanted for v in values)


def _any_contains(values: List[str], needle: str) -> bool:
    return any(needle in v.lower() for v in values)


class VerseStore:
    """Read-only, in-memory collection of verse records."""

    def __init__(self, records: List[VerseRecord]):
        self._records = tuple(records)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "VerseStore":
        """
        Load the corpus from a JSON file holding an array of verse objects.

        Raises:
            StartupError: the file is missing, unparsable or malformed
        """
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StartupError(f"Failed to load {path.name}: {e}") from e

        if not isinstance(raw, list):
            raise StartupError(f"{path.name} must contain a JSON array of verses")

        try:
            records = [VerseRecord.model_validate(item) for item in raw]
        except ValidationError as e:
            raise StartupError(f"Invalid verse record in {path.name}: {e}") from e

        logger.info("Loaded %d verses from %s", len(records), path)
        return cls(records)

    def __len__(self) -> int:
        return len(self._records)

    def get_all(self) -> List[VerseRecord]:
        return list(self._records)

    def get_by_mandala(self, mandala: Locator) -> List[VerseRecord]:
        results = [r for r in self._records if str(r.mandala) == str(mandala)]
        if not results:
            raise NotFoundError(f"Mandala {mandala} not found.")
        return results

    def search(self, query: Optional[str]) -> List[VerseRecord]:
        """Case-insensitive substring match on keywords, deities and themes."""
        if not query:
            raise ClientInputError(
                "Search requires a 'q' query parameter (e.g., /search?q=Agni).",
                body_key="message",
            )
        needle = query.lower()
        return [
            r
            for r in self._records
            if _any_contains(r.keywords, needle)
            or _any_contains(r.deities, needle)
            or _any_contains(r.themes, needle)
        ]

    def get_verse(self, mandala: Locator, hymn: Locator, verse: Locator) -> VerseRecord:
        for record in self._records:
            if record.matches_locator(mandala, hymn, verse):
                return record
        raise NotFoundError(f"Verse {mandala}.{hymn}.{verse} not found.")

    def get_by_theme(self, name: str) -> List[VerseRecord]:
        wanted = name.lower()
        results = [r for r in self._records if _any_equal(r.themes, wanted)]
        if not results:
            raise NotFoundError(f"No verses found for theme: {name}")
        return results

    def get_by_deity(self, name: str) -> dict:
        """Summary of the verses addressed to a deity (exact, case-insensitive)."""
        wanted = name.lower()
        results = [r for r in self._records if _any_equal(r.deities, wanted)]
        if not results:
            raise NotFoundError(f"No hymns found for deity {name}")
        return {
            "deity": name,
            "hymnCount": len(results),
            "hymns": [
                {
                    "mandala": r.mandala,
                    "hymn": r.hymn,
                    "verse": r.verse,
                    "sanskrit": r.sanskrit,
                    "translation": r.translation,
                }
                for r in results
            ],
        }
