"""Filtered, sorted views over alignments, glossary entries and rules."""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from alignment_inspector.models import (
    AlignmentDocument,
    EntityKind,
    GlossaryDocument,
    GlossaryEntry,
    IndexedLine,
    Rule,
    RuleDocument,
    SourceType,
    Word,
)
from alignment_inspector.patches import PatchStore
from alignment_inspector.resolver import resolve

GLOSSARY_VIEW_LIMIT = 50

_R = TypeVar("_R", GlossaryEntry, Rule)


# Letters with no canonical decomposition that collate as their base letter
_BASE_LETTERS = str.maketrans({
    "ı": "i",
    "ø": "o",
    "ł": "l",
    "đ": "d",
    "æ": "ae",
    "œ": "oe",
})


def collation_key(text: str | None) -> tuple[str, str, str]:
    """Sort key for locale-aware, case-insensitive comparison of forms.

    Compares on base letters first (accents stripped, case folded), then on
    the accented folded text, then on the raw text, so that ``ábaco`` sorts
    next to ``abaco`` rather than after ``z``.
    """
    text = "" if text is None else str(text)
    folded = text.casefold()
    base = "".join(
        c for c in unicodedata.normalize("NFKD", folded)
        if not unicodedata.combining(c)
    )
    return (base.translate(_BASE_LETTERS), folded, text)


def _matches(query: str, *values: str | None) -> bool:
    return any(query in str(value or "").lower() for value in values)


def filter_alignments(
    document: AlignmentDocument | None, query: str = ""
) -> list[IndexedLine]:
    """Lines whose source or target text contains ``query``.

    Each line keeps its position in the full document.
    """
    if document is None:
        return []
    query = query.lower()
    return [
        IndexedLine(index, line)
        for index, line in enumerate(document.alignments)
        if not query
        or query in line.source_line.lower()
        or query in line.target_line.lower()
    ]


def referenced_ids(word: Word, source_type: SourceType) -> set[str]:
    """Ids a word's morphemes reference in one base collection."""
    return {
        m.source_id
        for m in word.morphemes
        if m.source_type == source_type and m.source_id is not None
    }


def _scoped_view(
    records: Iterable[_R],
    kind: EntityKind,
    source_type: SourceType,
    store: PatchStore,
    query: str,
    selected_word: Word | None,
    search_fields: Callable[[_R], Sequence[str | None]],
) -> list[_R]:
    records = list(records)

    if selected_word is not None:
        ids = referenced_ids(selected_word, source_type)
        # A word that references nothing in this collection leaves it unscoped
        if ids:
            records = [r for r in records if r.id in ids]

    effective = {id(r): resolve(store, kind, r) for r in records}

    query = query.lower()
    if query:
        records = [
            r for r in records if _matches(query, *search_fields(effective[id(r)]))
        ]

    return sorted(records, key=lambda r: collation_key(effective[id(r)].form))


def filter_glossary(
    glossary: GlossaryDocument | None,
    store: PatchStore,
    query: str = "",
    selected_word: Word | None = None,
) -> list[GlossaryEntry]:
    """Glossary entries for the sidebar, at most ``GLOSSARY_VIEW_LIMIT``.

    Returns base entries; resolve them against the store for display.
    """
    if glossary is None:
        return []
    entries = _scoped_view(
        glossary.entries,
        EntityKind.GLOSSARY,
        SourceType.GLOSSARY,
        store,
        query,
        selected_word,
        lambda e: (e.form, e.gloss),
    )
    return entries[:GLOSSARY_VIEW_LIMIT]


def filter_rules(
    rules: RuleDocument | None,
    store: PatchStore,
    query: str = "",
    selected_word: Word | None = None,
) -> list[Rule]:
    """Rules for the sidebar; search also covers the description."""
    if rules is None:
        return []
    return _scoped_view(
        rules.rules,
        EntityKind.RULE,
        SourceType.RULE,
        store,
        query,
        selected_word,
        lambda r: (r.form, r.gloss, r.description),
    )
