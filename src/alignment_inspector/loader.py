"""JSON ingestion for the alignment, glossary and rule documents."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Union

from alignment_inspector.exceptions import DocumentError
from alignment_inspector.models import (
    AlignmentDocument,
    AlignmentLine,
    DocumentKind,
    GlossaryDocument,
    GlossaryEntry,
    Morpheme,
    Rule,
    RuleDocument,
    SourceType,
    Word,
)

logger = logging.getLogger(__name__)

Source = Union[str, bytes, Path, dict]

Document = Union[AlignmentDocument, GlossaryDocument, RuleDocument]


def load_alignments(source: Source) -> AlignmentDocument:
    """Load an alignment document from a file, JSON text or dictionary."""
    return _parse_alignments(_load_json(source))


def load_glossary(source: Source) -> GlossaryDocument:
    """Load a glossary document from a file, JSON text or dictionary."""
    return _parse_glossary(_load_json(source))


def load_rules(source: Source) -> RuleDocument:
    """Load a rule document from a file, JSON text or dictionary."""
    return _parse_rules(_load_json(source))


def load_document(kind: DocumentKind | str, source: Source) -> Document:
    """Load one of the three base documents by kind.

    Raises:
        DocumentError: If the data isn't valid JSON of the expected shape
        FileNotFoundError: If ``source`` names a file that doesn't exist
    """
    loaders: dict[DocumentKind, Callable[[Source], Document]] = {
        DocumentKind.ALIGNMENTS: load_alignments,
        DocumentKind.GLOSSARY: load_glossary,
        DocumentKind.RULES: load_rules,
    }
    return loaders[DocumentKind(kind)](source)


# ---------------------------------------------------------------------------
# Raw JSON
# ---------------------------------------------------------------------------

def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path rather than JSON text."""
    return not s.lstrip().startswith(("{", "["))


def _load_json(source: Source) -> dict[str, Any]:
    if isinstance(source, dict):
        data: Any = source
    elif isinstance(source, Path) or (
        isinstance(source, str) and _is_file_path(source)
    ):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        logger.debug(f"Reading {path}")
        data = _decode(path.read_bytes())
    else:
        data = _decode(source)

    if not isinstance(data, dict):
        raise DocumentError("Document root must be a JSON object")
    return data


def _decode(raw: str | bytes) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DocumentError(f"Invalid JSON: {e}") from e


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _require_str(data: dict, key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise DocumentError(f"{where}: field {key!r} must be a string")
    return value


def _optional_str(data: dict, key: str, where: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise DocumentError(f"{where}: field {key!r} must be a string")
    return value


def _require_id(data: dict, where: str) -> str:
    value = data.get("id")
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise DocumentError(f"{where}: field 'id' must be a string or integer")
    return str(value)


def _require_list(
    data: dict, key: str, where: str, default: list | None = None
) -> list:
    value = data.get(key, default)
    if not isinstance(value, list):
        raise DocumentError(f"{where}: field {key!r} must be a list")
    return value


def _require_object(value: Any, where: str) -> dict:
    if not isinstance(value, dict):
        raise DocumentError(f"{where} must be a JSON object")
    return value


def _extra(data: dict, known: tuple[str, ...]) -> dict[str, Any] | None:
    extra = {k: v for k, v in data.items() if k not in known}
    return extra or None


# ---------------------------------------------------------------------------
# Alignments
# ---------------------------------------------------------------------------

_MORPHEME_FIELDS = (
    "form", "gloss", "type", "source_type", "source_id", "pos", "notes",
)
_GLOSSARY_FIELDS = ("id", "form", "gloss", "pos", "notes")
_RULE_FIELDS = ("id", "form", "gloss", "type", "description")


def _parse_source_type(value: Any) -> SourceType:
    if value is None:
        return SourceType.NONE
    try:
        return SourceType(value)
    except ValueError:
        logger.debug(f"Treating unrecognised source_type {value!r} as none")
        return SourceType.NONE


def _parse_morpheme(data: Any, where: str) -> Morpheme:
    data = _require_object(data, where)
    source_id = data.get("source_id")
    return Morpheme(
        form=_require_str(data, "form", where),
        gloss=_optional_str(data, "gloss", where),
        type=_optional_str(data, "type", where) or "known",
        source_type=_parse_source_type(data.get("source_type")),
        source_id=None if source_id is None else str(source_id),
        pos=_optional_str(data, "pos", where),
        notes=_optional_str(data, "notes", where),
        extra=_extra(data, _MORPHEME_FIELDS),
    )


def _parse_word(data: Any, where: str) -> Word:
    data = _require_object(data, where)
    morphemes = _require_list(data, "morphemes", where, default=[])
    return Word(
        word=_require_str(data, "word", where),
        morphemes=tuple(
            _parse_morpheme(m, f"{where}, morpheme #{i + 1}")
            for i, m in enumerate(morphemes)
        ),
    )


def _parse_line(data: Any, where: str) -> AlignmentLine:
    data = _require_object(data, where)
    words = _require_list(data, "words", where, default=[])
    return AlignmentLine(
        source_line=_require_str(data, "source_line", where),
        target_line=_require_str(data, "target_line", where),
        words=tuple(
            _parse_word(w, f"{where}, word #{i + 1}") for i, w in enumerate(words)
        ),
    )


def _parse_alignments(data: dict[str, Any]) -> AlignmentDocument:
    lines = _require_list(data, "alignments", "Alignments")
    return AlignmentDocument(
        project=_optional_str(data, "project", "Alignments"),
        source_language=_optional_str(data, "source_language", "Alignments"),
        target_language=_optional_str(data, "target_language", "Alignments"),
        alignments=tuple(
            _parse_line(line, f"Line #{i + 1}") for i, line in enumerate(lines)
        ),
    )


# ---------------------------------------------------------------------------
# Glossary and rules
# ---------------------------------------------------------------------------

def _parse_glossary(data: dict[str, Any]) -> GlossaryDocument:
    entries = []
    for i, raw in enumerate(_require_list(data, "entries", "Glossary")):
        where = f"Glossary entry #{i + 1}"
        raw = _require_object(raw, where)
        entries.append(GlossaryEntry(
            id=_require_id(raw, where),
            form=_require_str(raw, "form", where),
            gloss=_optional_str(raw, "gloss", where),
            pos=_optional_str(raw, "pos", where),
            notes=_optional_str(raw, "notes", where),
            extra=_extra(raw, _GLOSSARY_FIELDS),
        ))
    return GlossaryDocument(tuple(entries))


def _parse_rules(data: dict[str, Any]) -> RuleDocument:
    rules = []
    for i, raw in enumerate(_require_list(data, "rules", "Rules")):
        where = f"Rule #{i + 1}"
        raw = _require_object(raw, where)
        rules.append(Rule(
            id=_require_id(raw, where),
            form=_require_str(raw, "form", where),
            gloss=_optional_str(raw, "gloss", where),
            type=_optional_str(raw, "type", where),
            description=_optional_str(raw, "description", where),
            extra=_extra(raw, _RULE_FIELDS),
        ))
    return RuleDocument(tuple(rules))
