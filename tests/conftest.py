"""Shared test fixtures for alignment-inspector."""

import json

import pytest

from alignment_inspector import (
    InspectorState,
    PatchStore,
    load_alignments,
    load_glossary,
    load_rules,
)

ALIGNMENTS = {
    "project": "Demo",
    "source_language": "en",
    "target_language": "tr",
    "alignments": [
        {
            "source_line": "He loved her",
            "target_line": "Onu amadı",
            "words": [
                {
                    "word": "onu",
                    "morphemes": [
                        {"form": "o", "gloss": "3SG", "type": "known",
                         "source_type": "glossary", "source_id": "g2"},
                        {"form": "nu", "gloss": "ACC", "type": "known",
                         "source_type": "rule", "source_id": "r1"},
                    ],
                },
                {
                    "word": "amadı",
                    "morphemes": [
                        {"form": "ama", "gloss": "love", "type": "known",
                         "source_type": "glossary", "source_id": "g1"},
                        {"form": "dı", "gloss": "?", "type": "unknown"},
                    ],
                },
            ],
        },
        {
            "source_line": "The dog barks",
            "target_line": "Köpek havlar",
            "words": [
                {
                    "word": "köpek",
                    "morphemes": [
                        {"form": "köpek", "gloss": "dog", "type": "known",
                         "source_type": "glossary", "source_id": "g3"},
                    ],
                },
            ],
        },
        {
            "source_line": "Love is old",
            "target_line": "Sevgi eski",
            "words": [],
        },
    ],
}

GLOSSARY = {
    "entries": [
        {"id": "g1", "form": "ama", "gloss": "love", "pos": "v"},
        {"id": "g2", "form": "o", "gloss": "3SG", "pos": "pron"},
        {"id": "g3", "form": "köpek", "gloss": "dog", "pos": "n",
         "notes": "common"},
    ],
}

RULES = {
    "rules": [
        {"id": "r1", "form": "nu", "gloss": "ACC", "type": "case",
         "description": "Accusative after a vowel"},
        {"id": "r2", "form": "lar", "gloss": "PL", "type": "number",
         "description": "Plural suffix"},
    ],
}


class RecordingStorage:
    """In-memory stand-in for PatchDB that records save calls."""

    def __init__(self, initial=None):
        self.initial = initial if initial is not None else {}
        self.saved = []

    def load(self):
        return self.initial

    def save(self, patches):
        self.saved.append(json.loads(json.dumps(patches)))
        return True


@pytest.fixture
def alignments():
    return load_alignments(ALIGNMENTS)


@pytest.fixture
def glossary():
    return load_glossary(GLOSSARY)


@pytest.fixture
def rules():
    return load_rules(RULES)


@pytest.fixture
def store():
    return PatchStore()


@pytest.fixture
def words(alignments):
    """The words of the demo document by surface form."""
    return {
        w.word: w
        for line in alignments.alignments
        for w in line.words
    }


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def state(storage):
    """State with all three documents loaded and recording storage."""
    st = InspectorState.open(storage)
    assert st.set_document("alignments", ALIGNMENTS)
    assert st.set_document("glossary", GLOSSARY)
    assert st.set_document("rules", RULES)
    return st


@pytest.fixture
def data_files(tmp_path):
    """The demo documents written to JSON files."""
    paths = {}
    for name, data in (
        ("alignments", ALIGNMENTS),
        ("glossary", GLOSSARY),
        ("rules", RULES),
    ):
        path = tmp_path / f"{name}.json"
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        paths[name] = path
    return paths
