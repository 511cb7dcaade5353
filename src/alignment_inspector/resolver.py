"""Effective-record resolution and morpheme cross-references."""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any

from alignment_inspector.models import (
    EntityKind,
    GlossaryDocument,
    Morpheme,
    Record,
    ResolvedMorpheme,
    RuleDocument,
    SourceType,
    Word,
)
from alignment_inspector.patches import Patch, PatchStore


def identity(kind: EntityKind | str, record: Record) -> str:
    """Return the patch identifier of a record.

    Glossary entries and rules are keyed by ``id``; unknown morphemes have
    no stable id and are keyed by surface ``form``.
    """
    if EntityKind(kind) is EntityKind.UNKNOWN:
        return record.form
    return record.id


def overlay(record: Record, patch: Patch | None) -> Record:
    """Return ``record`` with every field in ``patch`` overriding it."""
    if not patch:
        return record
    names = {f.name for f in fields(record)} - {"extra"}
    known: dict[str, Any] = {}
    extra: dict[str, Any] = dict(record.extra or {})
    for name, value in patch.items():
        if name in names:
            known[name] = value
        else:
            extra[name] = value
    return replace(record, extra=extra or None, **known)


def resolve(store: PatchStore, kind: EntityKind | str, record: Record) -> Record:
    """Return the effective (patched) version of a base record."""
    return overlay(record, store.get(kind, identity(kind, record)))


def _unknown(morpheme: Morpheme, store: PatchStore) -> ResolvedMorpheme:
    return ResolvedMorpheme(
        kind=EntityKind.UNKNOWN,
        morpheme=morpheme,
        effective=resolve(store, EntityKind.UNKNOWN, morpheme),
        original=morpheme,
    )


def resolve_morpheme(
    morpheme: Morpheme,
    glossary: GlossaryDocument | None,
    rules: RuleDocument | None,
    store: PatchStore,
) -> ResolvedMorpheme:
    """Link one morpheme to its glossary entry or rule.

    A reference to an id missing from the loaded document, or to a document
    that isn't loaded, degrades to an unknown morpheme.
    """
    if morpheme.source_type == SourceType.GLOSSARY:
        kind = EntityKind.GLOSSARY
        target = glossary.get(morpheme.source_id) if glossary else None
    elif morpheme.source_type == SourceType.RULE:
        kind = EntityKind.RULE
        target = rules.get(morpheme.source_id) if rules else None
    else:
        return _unknown(morpheme, store)

    if target is None:
        return _unknown(morpheme, store)
    return ResolvedMorpheme(
        kind=kind,
        morpheme=morpheme,
        effective=resolve(store, kind, target),
        original=target,
    )


def resolve_morphemes(
    word: Word,
    glossary: GlossaryDocument | None,
    rules: RuleDocument | None,
    store: PatchStore,
) -> list[ResolvedMorpheme]:
    """Resolve every morpheme of a word, in decomposition order."""
    return [resolve_morpheme(m, glossary, rules, store) for m in word.morphemes]
