"""Domain model dataclasses and enums for alignment-inspector."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Union

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class EntityKind(str, Enum):
    """Kinds of record a patch can be attached to."""

    GLOSSARY = "glossary"
    RULE = "rule"
    UNKNOWN = "unknown"


class DocumentKind(str, Enum):
    """The three base documents loaded from disk."""

    ALIGNMENTS = "alignments"
    GLOSSARY = "glossary"
    RULES = "rules"


class MorphemeType(str, Enum):
    """Analysis state of a morpheme as produced by the aligner."""

    KNOWN = "known"
    UNKNOWN = "unknown"


class SourceType(str, Enum):
    """Which base collection a morpheme was analysed from."""

    GLOSSARY = "glossary"
    RULE = "rule"
    NONE = "none"


class WordStatus(str, Enum):
    """Resolution state of a target word, derived from its morphemes."""

    KNOWN = "known"
    PATCHED = "patched"
    UNKNOWN = "unknown"
    MIXED = "mixed"


# Fields offered for editing, per entity kind
EDITABLE_FIELDS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.GLOSSARY: ("form", "gloss", "pos", "notes"),
    EntityKind.RULE: ("form", "gloss", "type", "description"),
    EntityKind.UNKNOWN: ("form", "gloss", "pos", "notes"),
}


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Morpheme:
    """One segment of a target word's decomposition."""

    form: str
    gloss: str | None
    type: str
    source_type: SourceType = SourceType.NONE
    source_id: str | None = None
    pos: str | None = None
    notes: str | None = None
    extra: dict[str, Any] | None = None

    @property
    def is_unknown(self) -> bool:
        return self.type == MorphemeType.UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        return _record_dict(self)


@dataclass(frozen=True, slots=True)
class GlossaryEntry:
    """A known morpheme from the glossary."""

    id: str
    form: str
    gloss: str | None
    pos: str | None = None
    notes: str | None = None
    extra: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return _record_dict(self)


@dataclass(frozen=True, slots=True)
class Rule:
    """A productive morphology rule."""

    id: str
    form: str
    gloss: str | None
    type: str | None = None
    description: str | None = None
    extra: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return _record_dict(self)


Record = Union[GlossaryEntry, Rule, Morpheme]


@dataclass(frozen=True, slots=True)
class Word:
    """A target-language word and its ordered morphemes."""

    word: str
    morphemes: tuple[Morpheme, ...] = ()


@dataclass(frozen=True, slots=True)
class AlignmentLine:
    """A source sentence aligned to its target sentence."""

    source_line: str
    target_line: str
    words: tuple[Word, ...] = ()


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AlignmentDocument:
    """The full set of alignments for one project."""

    project: str | None
    source_language: str | None
    target_language: str | None
    alignments: tuple[AlignmentLine, ...]

    def __len__(self) -> int:
        return len(self.alignments)


@dataclass(frozen=True, slots=True)
class GlossaryDocument:
    """All glossary entries, indexed by id."""

    entries: tuple[GlossaryEntry, ...]
    _by_id: dict[str, GlossaryEntry] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", _index_by_id(self.entries))

    def get(self, entry_id: str | None) -> GlossaryEntry | None:
        if entry_id is None:
            return None
        return self._by_id.get(entry_id)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class RuleDocument:
    """All rules, indexed by id."""

    rules: tuple[Rule, ...]
    _by_id: dict[str, Rule] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", _index_by_id(self.rules))

    def get(self, rule_id: str | None) -> Rule | None:
        if rule_id is None:
            return None
        return self._by_id.get(rule_id)

    def __len__(self) -> int:
        return len(self.rules)


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ResolvedMorpheme:
    """A morpheme linked back to the record it came from.

    ``kind`` is UNKNOWN when the morpheme has no source or its reference is
    dangling; ``original`` is then the morpheme itself.
    """

    kind: EntityKind
    morpheme: Morpheme
    effective: Record
    original: Record


@dataclass(frozen=True, slots=True)
class IndexedLine:
    """An alignment line paired with its position in the document."""

    index: int
    line: AlignmentLine


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _index_by_id(records: tuple) -> dict:
    index: dict = {}
    for record in records:
        # First record wins on duplicate ids
        index.setdefault(record.id, record)
    return index


def _record_dict(record: Record) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(record):
        if f.name == "extra":
            continue
        value = getattr(record, f.name)
        out[f.name] = value.value if isinstance(value, Enum) else value
    if record.extra:
        out.update(record.extra)
    return out
