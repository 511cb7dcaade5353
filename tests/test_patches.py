"""Tests for PatchKey and PatchStore."""

import pytest

from alignment_inspector import EntityKind, GlossaryEntry, PatchKey, PatchStore


@pytest.fixture
def entry():
    return GlossaryEntry(id="g1", form="ama", gloss="love", pos="v")


class TestPatchKey:

    def test_str_format(self):
        key = PatchKey(EntityKind.GLOSSARY, "g1")
        assert str(key) == "glossary:g1"

    def test_parse(self):
        key = PatchKey.parse("unknown:dı")
        assert key.kind is EntityKind.UNKNOWN
        assert key.identifier == "dı"

    def test_parse_identifier_with_colon(self):
        key = PatchKey.parse("rule:r:1")
        assert key == PatchKey(EntityKind.RULE, "r:1")
        assert str(key) == "rule:r:1"

    def test_parse_rejects_unknown_kind(self):
        with pytest.raises(ValueError):
            PatchKey.parse("synset:s1")

    def test_parse_rejects_missing_prefix(self):
        with pytest.raises(ValueError):
            PatchKey.parse("g1")


class TestApply:

    def test_differing_field_is_stored(self, store, entry):
        assert store.apply("glossary", "g1", {"gloss": "love (intr.)"}, entry)
        assert store.get("glossary", "g1") == {"gloss": "love (intr.)"}
        assert store.version == 1

    def test_unchanged_fields_are_dropped(self, store, entry):
        store.apply(
            "glossary", "g1",
            {"form": "ama", "gloss": "adore", "pos": "v", "notes": ""},
            entry,
        )
        assert store.get("glossary", "g1") == {"gloss": "adore"}

    def test_noop_edit_leaves_store_untouched(self, store, entry):
        store.apply("glossary", "g1", {"gloss": "adore"}, entry)
        before = store.to_mapping()
        version = store.version

        changed = store.apply(
            "glossary", "g1", {"form": "ama", "gloss": "love", "notes": ""}, entry
        )

        assert changed is False
        assert store.to_mapping() == before
        assert store.version == version

    def test_noop_on_empty_store_creates_nothing(self, store, entry):
        assert not store.apply("glossary", "g1", {"gloss": "love"}, entry)
        assert len(store) == 0
        assert store.get("glossary", "g1") is None

    def test_absent_original_field_counts_as_empty(self, store, entry):
        assert not store.apply("glossary", "g1", {"notes": ""}, entry)
        assert store.apply("glossary", "g1", {"notes": "archaic"}, entry)

    def test_mapping_original(self, store):
        original = {"form": "dı", "gloss": "?"}
        assert not store.apply("unknown", "dı", {"gloss": "?"}, original)
        assert store.apply("unknown", "dı", {"gloss": "PAST"}, original)

    def test_none_original_compares_against_empty(self, store):
        assert not store.apply("unknown", "x", {"gloss": ""}, None)
        assert store.apply("unknown", "x", {"gloss": "y"}, None)

    def test_disjoint_edits_merge(self, store, entry):
        store.apply("glossary", "g1", {"gloss": "adore"}, entry)
        store.apply("glossary", "g1", {"notes": "poetic"}, entry)
        assert store.get("glossary", "g1") == {"gloss": "adore", "notes": "poetic"}

    def test_new_value_wins_on_conflict(self, store, entry):
        store.apply("glossary", "g1", {"gloss": "adore", "pos": "n"}, entry)
        store.apply("glossary", "g1", {"gloss": "cherish"}, entry)
        assert store.get("glossary", "g1") == {"gloss": "cherish", "pos": "n"}

    def test_resetting_to_base_keeps_earlier_patch(self, store, entry):
        store.apply("glossary", "g1", {"gloss": "adore"}, entry)
        assert not store.apply("glossary", "g1", {"gloss": "love"}, entry)
        assert store.get("glossary", "g1") == {"gloss": "adore"}

    def test_kinds_are_separate(self, store, entry):
        store.apply("glossary", "g1", {"gloss": "adore"}, entry)
        assert store.get("rule", "g1") is None
        assert store.get("unknown", "g1") is None


class TestReads:

    def test_has_edit(self, store, entry):
        assert not store.has_edit("glossary", "g1")
        store.apply("glossary", "g1", {"gloss": "adore"}, entry)
        assert store.has_edit("glossary", "g1")
        assert store.has_edit(EntityKind.GLOSSARY, "g1")

    def test_get_returns_copy(self, store, entry):
        store.apply("glossary", "g1", {"gloss": "adore"}, entry)
        patch = store.get("glossary", "g1")
        patch["gloss"] = "mutated"
        assert store.get("glossary", "g1") == {"gloss": "adore"}

    def test_keys_by_kind(self, store, entry):
        store.apply("glossary", "g1", {"gloss": "adore"}, entry)
        store.apply("unknown", "dı", {"gloss": "PAST"}, None)
        assert store.keys("unknown") == [PatchKey(EntityKind.UNKNOWN, "dı")]
        assert len(store.keys()) == 2
        assert PatchKey(EntityKind.GLOSSARY, "g1") in store


class TestPersistedShape:

    def test_to_mapping_uses_flat_string_keys(self, store, entry):
        store.apply("glossary", "g1", {"gloss": "love (intr.)"}, entry)
        store.apply("unknown", "dı", {"gloss": "PAST"}, None)
        assert store.to_mapping() == {
            "glossary:g1": {"gloss": "love (intr.)"},
            "unknown:dı": {"gloss": "PAST"},
        }

    def test_from_mapping(self):
        store = PatchStore.from_mapping({"rule:r1": {"gloss": "ACC.DEF"}})
        assert store.get("rule", "r1") == {"gloss": "ACC.DEF"}
        assert store.version == 0

    @pytest.mark.parametrize("data", [None, [], "glossary:g1", 42])
    def test_from_non_mapping_is_empty(self, data):
        assert len(PatchStore.from_mapping(data)) == 0

    def test_from_mapping_skips_malformed_entries(self):
        store = PatchStore.from_mapping({
            "glossary:g1": {"gloss": "adore"},
            "nonsense": {"gloss": "x"},
            "lexicon:l1": {"gloss": "x"},
            "rule:r1": "not a mapping",
            "unknown:dı": {},
        })
        assert store.to_mapping() == {"glossary:g1": {"gloss": "adore"}}

    def test_from_mapping_drops_non_text_values(self):
        store = PatchStore.from_mapping({
            "glossary:1": {"form": 5},
            "unknown:dı": {"gloss": 7, "notes": "kept", "pos": None},
            "rule:r1": {"gloss": ["ACC"], "description": {"a": 1}},
        })
        assert store.to_mapping() == {
            "unknown:dı": {"notes": "kept", "pos": None},
        }

    def test_from_mapping_never_patches_id(self):
        store = PatchStore.from_mapping({
            "glossary:g1": {"id": "g2", "gloss": "adore"},
            "rule:r1": {"id": "r9"},
        })
        assert store.to_mapping() == {"glossary:g1": {"gloss": "adore"}}
