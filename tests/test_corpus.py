"""
Test suite for corpus records and loading.
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from portfolio_assistant.models.corpus import Corpus, load_corpus
from portfolio_assistant.rag.chunking import build_chunks

SAMPLE_CORPUS = Path(__file__).resolve().parents[1] / "data" / "context.json"


def test_work_entries_keep_source_order():
    corpus = Corpus.model_validate({"work": {"b": {}, "a": {}, "c": {}}})

    assert [key for key, _ in corpus.work_entries()] == ["b", "a", "c"]


def test_nulls_fall_back_to_defaults():
    corpus = Corpus.model_validate(
        {"academics": None, "work": {"lab": {"projects": None}}, "system_instructions": None}
    )

    assert corpus.academics.courses == []
    assert corpus.work["lab"].projects == []
    assert corpus.system_instructions is None


def test_unknown_keys_ignored():
    corpus = Corpus.model_validate({"hobbies": ["chess"], "profile": {"name": "A", "age": 30}})

    assert corpus.profile.name == "A"


def test_numeric_year_and_team_size_accepted():
    corpus = Corpus.model_validate(
        {
            "academics": {"courses": [{"identifier": "X", "year": 2021}]},
            "work": {"w": {"projects": [{"name": "P", "team_size": "3-5"}]}},
        }
    )

    assert corpus.academics.courses[0].year == 2021
    assert corpus.work["w"].projects[0].team_size == "3-5"


def test_wrong_shape_rejected():
    with pytest.raises(ValidationError):
        Corpus.model_validate({"projects": "not a list"})


def test_load_corpus(tmp_path):
    path = tmp_path / "context.json"
    path.write_text(json.dumps({"profile": {"name": "Alice"}}), encoding="utf-8")

    corpus = load_corpus(path)

    assert corpus.profile.name == "Alice"


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_corpus(tmp_path / "missing.json")


def test_bundled_sample_corpus_chunks():
    chunks = build_chunks(load_corpus(SAMPLE_CORPUS))

    assert chunks[0].metadata == {"type": "bio"}
    assert [c.metadata.get("workplace") for c in chunks if "workplace" in c.metadata] == [
        "envision_center",
        "envision_center",
        "data_mine",
    ]
