"""InspectorState: the explicitly owned application state."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from alignment_inspector import resolver as _resolver
from alignment_inspector import status as _status
from alignment_inspector import views as _views
from alignment_inspector.exceptions import DocumentError, EntityNotFoundError
from alignment_inspector.loader import Source, load_document
from alignment_inspector.models import (
    AlignmentDocument,
    DocumentKind,
    EntityKind,
    GlossaryDocument,
    GlossaryEntry,
    IndexedLine,
    Record,
    ResolvedMorpheme,
    Rule,
    RuleDocument,
    Word,
    WordStatus,
)
from alignment_inspector.patches import PatchStore

logger = logging.getLogger(__name__)


class PatchStorage(Protocol):
    """Anything that can load and save the flat patch mapping."""

    def load(self) -> Mapping[str, Any]: ...

    def save(self, patches: Mapping[str, Mapping[str, Any]]) -> Any: ...


class InspectorState:
    """Documents, query state and patches for one inspector session.

    Documents are replaced wholesale through :meth:`set_document`; patches
    change only through :meth:`apply_edit`. Every derived value is computed
    on demand from the current state.
    """

    def __init__(
        self,
        patches: PatchStore | None = None,
        storage: PatchStorage | None = None,
    ) -> None:
        self.alignments: AlignmentDocument | None = None
        self.glossary: GlossaryDocument | None = None
        self.rules: RuleDocument | None = None
        self.search_query = ""
        self.sidebar_search = ""
        self.selected_word: Word | None = None
        self.patches = patches if patches is not None else PatchStore()
        self.storage = storage

    @classmethod
    def open(cls, storage: PatchStorage | None = None) -> InspectorState:
        """Create state with patches loaded from ``storage``."""
        patches = PatchStore.from_mapping(storage.load()) if storage else PatchStore()
        logger.info(f"Opened inspector with {len(patches)} patches")
        return cls(patches=patches, storage=storage)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def set_document(self, kind: DocumentKind | str, source: Source) -> bool:
        """Load a base document; on failure keep the previous one."""
        kind = DocumentKind(kind)
        try:
            document = load_document(kind, source)
        except (DocumentError, FileNotFoundError) as e:
            logger.warning(f"Error loading {kind.value}: {e}")
            return False
        setattr(self, kind.value, document)
        logger.info(f"Loaded {kind.value}: {len(document)} items")
        return True

    def is_loaded(self) -> bool:
        return (
            self.alignments is not None
            and self.glossary is not None
            and self.rules is not None
        )

    def reset(self) -> None:
        """Drop documents, queries and selection. Patches are kept."""
        self.alignments = None
        self.glossary = None
        self.rules = None
        self.search_query = ""
        self.sidebar_search = ""
        self.selected_word = None

    def stats(self) -> dict[str, int]:
        return {
            "lines": len(self.alignments) if self.alignments else 0,
            "glossary_entries": len(self.glossary) if self.glossary else 0,
            "rules": len(self.rules) if self.rules else 0,
        }

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def apply_edit(
        self,
        kind: EntityKind | str,
        record: Record,
        field_edits: Mapping[str, Any],
    ) -> bool:
        """Record an edit of a base record and persist it if anything changed."""
        kind = EntityKind(kind)
        identifier = _resolver.identity(kind, record)
        if not self.patches.apply(kind, identifier, field_edits, record):
            return False
        if self.storage is not None:
            self.storage.save(self.patches.to_mapping())
        logger.info(f"Saved edit for {kind.value}:{identifier}")
        return True

    def effective(self, kind: EntityKind | str, record: Record) -> Record:
        return _resolver.resolve(self.patches, kind, record)

    def is_edited(self, kind: EntityKind | str, record: Record) -> bool:
        return self.patches.has_edit(kind, _resolver.identity(kind, record))

    def import_patches(self, data: Any) -> int:
        """Merge an exported patch mapping into the store.

        Each incoming patch is applied like a user edit against the base
        record it targets, so values equal to the base are dropped. Returns
        the number of keys that changed.
        """
        incoming = PatchStore.from_mapping(data)
        changed = 0
        for key in incoming:
            record = self.find_record(key.kind, key.identifier)
            patch = incoming.get(key.kind, key.identifier) or {}
            if self.patches.apply(key.kind, key.identifier, patch, record):
                changed += 1
        if changed and self.storage is not None:
            self.storage.save(self.patches.to_mapping())
        logger.info(f"Imported {changed} of {len(incoming)} patches")
        return changed

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_record(self, kind: EntityKind | str, identifier: str) -> Record | None:
        """Return the base record a patch key refers to, if loaded.

        Unknown morphemes are looked up by form across all alignments,
        preferring one whose type is unknown.
        """
        kind = EntityKind(kind)
        if kind is EntityKind.GLOSSARY:
            return self.glossary.get(identifier) if self.glossary else None
        if kind is EntityKind.RULE:
            return self.rules.get(identifier) if self.rules else None

        fallback = None
        lines = self.alignments.alignments if self.alignments else ()
        for line in lines:
            for word in line.words:
                for morpheme in word.morphemes:
                    if morpheme.form != identifier:
                        continue
                    if morpheme.is_unknown:
                        return morpheme
                    fallback = fallback or morpheme
        return fallback

    def word_at(self, line_number: int, word_number: int) -> Word:
        """Return a word by 1-based line and word position."""
        if self.alignments is None:
            raise EntityNotFoundError("No alignments loaded")
        lines = self.alignments.alignments
        if not 1 <= line_number <= len(lines):
            raise EntityNotFoundError(f"Line not found: {line_number}")
        words = lines[line_number - 1].words
        if not 1 <= word_number <= len(words):
            raise EntityNotFoundError(
                f"Word not found: {word_number} on line {line_number}"
            )
        return words[word_number - 1]

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_word(self, word: Word) -> None:
        """Select ``word``, or clear the selection if it is already selected."""
        self.selected_word = None if self.selected_word is word else word

    def deselect_word(self) -> None:
        self.selected_word = None

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def alignment_view(self) -> list[IndexedLine]:
        return _views.filter_alignments(self.alignments, self.search_query)

    def glossary_view(self) -> list[GlossaryEntry]:
        return _views.filter_glossary(
            self.glossary, self.patches, self.sidebar_search, self.selected_word
        )

    def rule_view(self) -> list[Rule]:
        return _views.filter_rules(
            self.rules, self.patches, self.sidebar_search, self.selected_word
        )

    def morpheme_entries(self, word: Word | None) -> list[ResolvedMorpheme]:
        if word is None:
            return []
        return _resolver.resolve_morphemes(
            word, self.glossary, self.rules, self.patches
        )

    def word_status(self, word: Word) -> WordStatus:
        return _status.classify_word(word, self.glossary, self.rules, self.patches)

    def word_gloss(self, word: Word) -> str:
        return _status.aggregate_gloss(word, self.glossary, self.rules, self.patches)
