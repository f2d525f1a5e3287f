"""Tests for JSON bundle parsing and the filesystem loader."""

import json
import logging
from pathlib import Path

import pytest

from wikimsg import MessageStore, PathMessageLoader
from wikimsg.localization import BundleLoadResult, LoadStatus, LoadSummary, parse_bundle


def write_bundle(directory: Path, locale: str, data: object) -> Path:
    path = directory / f"{locale}.json"
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path


class TestParseBundle:
    """JSON bundle contents."""

    def test_metadata_dropped(self) -> None:
        source = json.dumps({"@metadata": {"authors": ["A"]}, "hello": "Hello"})
        assert parse_bundle(source) == {"hello": "Hello"}

    def test_non_string_values_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        source = json.dumps({"count": 3, "hello": "Hello", "list": ["x"]})
        with caplog.at_level(logging.WARNING, logger="wikimsg.localization.loading"):
            messages = parse_bundle(source, source_path="en.json")
        assert messages == {"hello": "Hello"}
        assert "Skipping non-string message 'count' in en.json (int)" in caplog.text

    def test_non_object_rejected(self) -> None:
        with pytest.raises(ValueError, match="must be a JSON object, got list"):
            parse_bundle("[]")

    def test_invalid_json_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_bundle("{not json")


class TestPathMessageLoader:
    """Filesystem loading with traversal checks."""

    def test_load(self, tmp_path: Path) -> None:
        write_bundle(tmp_path, "fi", {"@metadata": {}, "sitename-in": "{{GRAMMAR:inessive|Wikipedia}}"})
        loader = PathMessageLoader(str(tmp_path / "{locale}.json"))
        assert loader.load("fi") == {"sitename-in": "{{GRAMMAR:inessive|Wikipedia}}"}

    def test_missing_bundle(self, tmp_path: Path) -> None:
        loader = PathMessageLoader(str(tmp_path / "{locale}.json"))
        with pytest.raises(FileNotFoundError):
            loader.load("de")

    def test_placeholder_required(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="placeholder"):
            PathMessageLoader(str(tmp_path / "en.json"))

    @pytest.mark.parametrize(
        ("locale", "match"),
        [
            ("", "cannot be empty"),
            ("../secrets", "Path traversal sequences"),
            ("en/../../x", "Path traversal sequences"),
            ("a/b", "Path separators"),
            ("a\\b", "Path separators"),
        ],
    )
    def test_unsafe_locales_rejected(self, tmp_path: Path, locale: str, match: str) -> None:
        loader = PathMessageLoader(str(tmp_path / "{locale}.json"))
        with pytest.raises(ValueError, match=match):
            loader.load(locale)

    def test_resolved_path_outside_root_rejected(self, tmp_path: Path) -> None:
        bundles = tmp_path / "bundles"
        bundles.mkdir()
        outside = tmp_path / "outside"
        outside.mkdir()
        write_bundle(outside, "en", {"a": "A"})
        loader = PathMessageLoader(str(outside / "{locale}.json"), root_dir=str(bundles))
        with pytest.raises(ValueError, match="escapes root directory"):
            loader.load("en")

    def test_describe_path(self) -> None:
        loader = PathMessageLoader("i18n/{locale}.json")
        assert loader.describe_path("pt-br") == "i18n/pt-br.json"


class TestStoreFromDirectory:
    """MessageStore chains built from files."""

    def test_chain_with_missing_and_malformed_files(self, tmp_path: Path) -> None:
        write_bundle(tmp_path, "en", {"hello": "Hello", "bye": "Bye"})
        write_bundle(tmp_path, "pt", {"hello": "Olá"})
        (tmp_path / "pt-br.json").write_text("{broken", encoding="utf-8")
        loader = PathMessageLoader(str(tmp_path / "{locale}.json"))

        store = MessageStore.from_loader(loader, ["pt-br", "pt", "en"])

        assert store.get("hello") == "Olá"
        assert store.get("bye") == "Bye"
        summary = store.load_summary()
        assert summary is not None
        assert summary.errors == 1
        assert summary.successful == 2
        assert summary.results[0].is_error
        assert isinstance(summary.results[0].error, ValueError)


class TestLoadSummary:
    """Aggregate counts."""

    def test_counts_and_repr(self) -> None:
        summary = LoadSummary(
            (
                BundleLoadResult("en", LoadStatus.SUCCESS, message_count=3),
                BundleLoadResult("de", LoadStatus.NOT_FOUND),
                BundleLoadResult("fr", LoadStatus.ERROR, error=OSError("denied")),
            )
        )
        assert repr(summary) == "LoadSummary(total=3, ok=1, not_found=1, errors=1)"
        assert [r.locale for r in summary.get_errors()] == ["fr"]

    def test_all_successful(self) -> None:
        summary = LoadSummary((BundleLoadResult("en", LoadStatus.SUCCESS),))
        assert summary.all_successful
        assert LoadSummary(()).all_successful
