"""Word-level status classification and gloss aggregation."""

from __future__ import annotations

from alignment_inspector.models import (
    EntityKind,
    GlossaryDocument,
    Morpheme,
    RuleDocument,
    Word,
    WordStatus,
)
from alignment_inspector.patches import PatchStore
from alignment_inspector.resolver import resolve, resolve_morpheme

GLOSS_SEPARATOR = " + "


def _patched_unknown_gloss(morpheme: Morpheme, store: PatchStore) -> str | None:
    """Return the user-supplied gloss for a morpheme, if it adds anything."""
    gloss = resolve(store, EntityKind.UNKNOWN, morpheme).gloss
    if gloss and gloss != morpheme.gloss:
        return gloss
    return None


def classify_word(
    word: Word,
    glossary: GlossaryDocument | None,
    rules: RuleDocument | None,
    store: PatchStore,
) -> WordStatus:
    """Summarise how far a word's morphemes have been analysed.

    An unknown morpheme counts as resolved once a patch gives it a
    non-empty gloss different from the aligner's. ``glossary`` and
    ``rules`` are accepted for symmetry with :func:`aggregate_gloss`; the
    status only depends on morpheme types and unknown-morpheme patches.
    """
    unresolved = resolved = known = 0
    for morpheme in word.morphemes:
        if not morpheme.is_unknown:
            known += 1
        elif _patched_unknown_gloss(morpheme, store) is None:
            unresolved += 1
        else:
            resolved += 1

    if unresolved and (known or resolved):
        return WordStatus.MIXED
    if unresolved:
        return WordStatus.UNKNOWN
    if resolved:
        return WordStatus.PATCHED
    return WordStatus.KNOWN


def aggregate_gloss(
    word: Word,
    glossary: GlossaryDocument | None,
    rules: RuleDocument | None,
    store: PatchStore,
) -> str:
    """Join the effective glosses of a word's morphemes with ``" + "``."""
    parts: list[str] = []
    for morpheme in word.morphemes:
        resolved = resolve_morpheme(morpheme, glossary, rules, store)
        if resolved.kind is not EntityKind.UNKNOWN:
            parts.append(resolved.effective.gloss or "")
            continue
        parts.append(
            _patched_unknown_gloss(morpheme, store) or morpheme.gloss or ""
        )
    return GLOSS_SEPARATOR.join(parts)


def short_gloss(text: str, limit: int = 13, keep: int = 10) -> str:
    """Abbreviate a gloss for compact display."""
    if len(text) > limit:
        return text[:keep] + "..."
    return text
