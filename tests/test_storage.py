"""Tests for the settings store and shareable snippet links."""

import json

import pytest

from codeplay.client.storage import (
    SESSION_KEY,
    THEME_KEY,
    SettingsStore,
    SnippetData,
    decode_snippet,
    encode_snippet,
    initial_state,
)
from codeplay.core.languages import LANGUAGES, Language


def test_missing_file_starts_empty(tmp_path):
    store = SettingsStore(tmp_path / "none.json").load()
    assert store.get(THEME_KEY) is None
    assert store.load_theme() == "dark"
    assert store.load_session() == SnippetData.default()


def test_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "s.json"
    path.write_text("{not json")
    assert SettingsStore(path).load().get(SESSION_KEY) is None


def test_set_writes_through(tmp_path):
    path = tmp_path / "nested" / "s.json"
    store = SettingsStore(path).load()
    store.save_theme("light")
    assert json.loads(path.read_text()) == {THEME_KEY: "light"}
    store.delete(THEME_KEY)
    assert json.loads(path.read_text()) == {}


def test_invalid_theme_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        SettingsStore(tmp_path / "s.json").load().save_theme("solarized")


def test_session_with_missing_code_uses_python_snippet(tmp_path):
    path = tmp_path / "s.json"
    path.write_text(json.dumps({SESSION_KEY: {"language": "go"}}))
    data = SettingsStore(path).load().load_session()
    assert data.language is Language.go
    assert data.code == LANGUAGES[Language.python].snippet


def test_session_with_unknown_language_falls_back(tmp_path):
    path = tmp_path / "s.json"
    path.write_text(json.dumps({SESSION_KEY: {"language": "cobol", "code": "x"}}))
    assert SettingsStore(path).load().load_session() == SnippetData.default()


def test_share_link_round_trip_is_exact():
    data = SnippetData(Language.cpp, '#include <iostream>\n// ünïcødé ✓\tcin >> x;\n')
    token = encode_snippet(data)
    assert "=" not in token and "+" not in token and "/" not in token
    assert decode_snippet("#" + token) == data


@pytest.mark.parametrize("fragment", [None, "", "#", "#not-a-snippet", "#" + "A" * 7])
def test_bad_fragments_decode_to_none(fragment):
    assert decode_snippet(fragment) is None


def test_initial_state_prefers_fragment(tmp_path):
    store = SettingsStore(tmp_path / "s.json").load()
    store.save_session(SnippetData(Language.php, "<?php"))
    shared = SnippetData(Language.go, "package main")

    assert initial_state("#" + encode_snippet(shared), store) == shared
    assert initial_state("", store) == SnippetData(Language.php, "<?php")
    assert initial_state() == SnippetData.default()


def test_only_one_leading_hash_is_stripped():
    data = SnippetData(Language.python, "print(1)")
    token = encode_snippet(data)
    assert decode_snippet(token) == data
    assert decode_snippet("##" + token) is None
