"""Tests for the command line entry point."""

import json

import pytest

from spanish_reader.main import main


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("SPANISH_READER_DB", str(tmp_path / "store.db"))
    monkeypatch.delenv("FIREBASE_PROJECT_ID", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    return tmp_path


def test_books_on_empty_store(cli_env, capsys):
    assert main(["--project-root", str(cli_env), "books"]) == 0
    assert capsys.readouterr().out == ""


def test_import_then_list_vocabulary(cli_env, capsys):
    source = cli_env / "vocab.json"
    source.write_text(
        json.dumps([{"id": "v1", "word": "casa", "translation": "Haus", "addedAt": 1}]),
        encoding="utf-8",
    )

    assert main(["--project-root", str(cli_env), "import", str(source)]) == 0
    assert main(["--project-root", str(cli_env), "vocab"]) == 0

    out = capsys.readouterr().out
    assert "Imported 1 items" in out
    assert "casa = Haus" in out


def test_scan_without_api_key_fails(cli_env, capsys):
    image = cli_env / "page.jpg"
    image.write_bytes(b"jpeg")

    assert main(["--project-root", str(cli_env), "scan", str(image)]) == 1
    assert "API key is missing" in capsys.readouterr().out


def test_read_unknown_page(cli_env, capsys):
    assert main(["--project-root", str(cli_env), "read", "nope", "1"]) == 1
