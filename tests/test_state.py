"""Tests for InspectorState."""

import pytest

from alignment_inspector import (
    EntityKind,
    EntityNotFoundError,
    InspectorState,
    Morpheme,
    WordStatus,
)

from conftest import ALIGNMENTS, RecordingStorage


class TestOpen:

    def test_loads_persisted_patches(self):
        storage = RecordingStorage({"glossary:g1": {"gloss": "adore"}})
        state = InspectorState.open(storage)
        assert state.patches.get("glossary", "g1") == {"gloss": "adore"}

    def test_corrupt_persisted_state_is_empty(self):
        state = InspectorState.open(RecordingStorage(["not", "a", "mapping"]))
        assert len(state.patches) == 0

    def test_without_storage(self):
        state = InspectorState.open()
        assert len(state.patches) == 0
        assert not state.is_loaded()


class TestDocuments:

    def test_loaded(self, state):
        assert state.is_loaded()
        assert state.stats() == {"lines": 3, "glossary_entries": 3, "rules": 2}

    def test_failed_load_keeps_previous_document(self, state):
        before = state.glossary
        assert state.set_document("glossary", "{broken") is False
        assert state.glossary is before

    def test_missing_file_keeps_previous_document(self, state, tmp_path):
        before = state.rules
        assert state.set_document("rules", tmp_path / "nope.json") is False
        assert state.rules is before

    def test_set_document_from_file(self, data_files):
        state = InspectorState()
        assert state.set_document("alignments", data_files["alignments"])
        assert state.alignments.project == "Demo"
        assert not state.is_loaded()

    def test_reset_keeps_patches(self, state):
        state.apply_edit("glossary", state.glossary.get("g1"), {"gloss": "adore"})
        state.search_query = "dog"
        state.select_word(state.word_at(1, 1))

        state.reset()

        assert state.alignments is None and state.glossary is None
        assert state.search_query == "" and state.sidebar_search == ""
        assert state.selected_word is None
        assert state.patches.has_edit("glossary", "g1")
        assert state.stats() == {"lines": 0, "glossary_entries": 0, "rules": 0}


class TestApplyEdit:

    def test_change_is_persisted(self, state, storage):
        entry = state.glossary.get("g1")
        assert state.apply_edit("glossary", entry, {"gloss": "love (intr.)"})
        assert storage.saved == [{"glossary:g1": {"gloss": "love (intr.)"}}]

    def test_noop_is_not_persisted(self, state, storage):
        entry = state.glossary.get("g1")
        assert not state.apply_edit(
            "glossary", entry, {"form": "ama", "gloss": "love", "notes": ""}
        )
        assert storage.saved == []
        assert len(state.patches) == 0

    def test_unknown_edit_keyed_by_form(self, state, storage):
        morpheme = state.word_at(1, 2).morphemes[1]
        state.apply_edit("unknown", morpheme, {"gloss": "PAST"})
        assert storage.saved[-1] == {"unknown:dı": {"gloss": "PAST"}}

    def test_read_after_write(self, state):
        amadi = state.word_at(1, 2)
        assert state.word_status(amadi) is WordStatus.MIXED
        state.apply_edit("unknown", amadi.morphemes[1], {"gloss": "PAST"})
        assert state.word_status(amadi) is WordStatus.PATCHED
        assert state.word_gloss(amadi) == "love + PAST"

    def test_effective_and_is_edited(self, state):
        entry = state.glossary.get("g3")
        assert not state.is_edited("glossary", entry)
        state.apply_edit("glossary", entry, {"notes": "also 'hound'"})
        assert state.is_edited(EntityKind.GLOSSARY, entry)
        assert state.effective("glossary", entry).notes == "also 'hound'"


class TestImportPatches:

    def test_import_merges_and_saves_once(self, state, storage):
        changed = state.import_patches({
            "glossary:g1": {"gloss": "adore", "pos": "v"},
            "unknown:dı": {"gloss": "PAST"},
            "rule:r1": {"gloss": "ACC"},
            "bogus": {"gloss": "x"},
        })
        assert changed == 2
        assert len(storage.saved) == 1
        assert state.patches.to_mapping() == {
            "glossary:g1": {"gloss": "adore"},
            "unknown:dı": {"gloss": "PAST"},
        }

    def test_import_nothing_new(self, state, storage):
        assert state.import_patches({"rule:r1": {"gloss": "ACC"}}) == 0
        assert storage.saved == []

    def test_import_for_unloaded_record(self, storage):
        state = InspectorState.open(storage)
        assert state.import_patches({"glossary:g9": {"gloss": "x"}}) == 1
        assert state.patches.get("glossary", "g9") == {"gloss": "x"}


class TestSelection:

    def test_select_toggles(self, state):
        word = state.word_at(1, 1)
        state.select_word(word)
        assert state.selected_word is word
        state.select_word(word)
        assert state.selected_word is None

    def test_select_other_word_replaces(self, state):
        state.select_word(state.word_at(1, 1))
        other = state.word_at(2, 1)
        state.select_word(other)
        assert state.selected_word is other

    def test_deselect(self, state):
        state.select_word(state.word_at(1, 1))
        state.deselect_word()
        assert state.selected_word is None

    def test_views_follow_selection_and_search(self, state):
        state.select_word(state.word_at(1, 1))
        assert [e.id for e in state.glossary_view()] == ["g2"]
        assert [r.id for r in state.rule_view()] == ["r1"]
        state.deselect_word()
        state.sidebar_search = "plural"
        assert state.glossary_view() == []
        assert [r.id for r in state.rule_view()] == ["r2"]

    def test_alignment_view_uses_search_query(self, state):
        state.search_query = "dog"
        assert [item.index for item in state.alignment_view()] == [1]

    def test_morpheme_entries(self, state):
        entries = state.morpheme_entries(state.word_at(1, 2))
        assert [e.kind for e in entries] == [EntityKind.GLOSSARY, EntityKind.UNKNOWN]
        assert state.morpheme_entries(None) == []


class TestLookup:

    def test_find_glossary_and_rule(self, state):
        assert state.find_record("glossary", "g2").form == "o"
        assert state.find_record("rule", "r2").gloss == "PL"
        assert state.find_record("rule", "r99") is None

    def test_find_unknown_prefers_unknown_type(self):
        data = {"alignments": [{
            "source_line": "a", "target_line": "b",
            "words": [{"word": "b", "morphemes": [
                {"form": "lA", "gloss": "with", "type": "known"},
                {"form": "lA", "gloss": "?", "type": "unknown"},
            ]}],
        }]}
        state = InspectorState()
        state.set_document("alignments", data)
        found = state.find_record("unknown", "lA")
        assert isinstance(found, Morpheme)
        assert found.is_unknown

    def test_find_unknown_falls_back_to_any_morpheme(self, state):
        assert state.find_record("unknown", "ama").gloss == "love"
        assert state.find_record("unknown", "zzz") is None

    def test_word_at(self, state):
        assert state.word_at(2, 1).word == "köpek"

    @pytest.mark.parametrize("line, index", [(0, 1), (4, 1), (1, 3), (3, 1)])
    def test_word_at_out_of_range(self, state, line, index):
        with pytest.raises(EntityNotFoundError):
            state.word_at(line, index)

    def test_word_at_without_alignments(self):
        with pytest.raises(EntityNotFoundError):
            InspectorState().word_at(1, 1)

    def test_documents_are_not_mutated(self, state):
        state.apply_edit("glossary", state.glossary.get("g1"), {"gloss": "adore"})
        assert state.glossary.get("g1").gloss == "love"
        assert ALIGNMENTS["alignments"][0]["words"][1]["morphemes"][0]["gloss"] == "love"
