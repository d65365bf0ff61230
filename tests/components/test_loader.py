from __future__ import annotations

from pathlib import Path

import pytest

from helpers.io_utils import write_yaml
from spanner.core.components import find_all, load_file
from spanner.core.exceptions import ValidationError


def test_find_all_reads_mappings_and_lists_recursively(tmp_path: Path) -> None:
    write_yaml(tmp_path / "b.yaml", {"url": "https://x/b"})
    write_yaml(tmp_path / "nested" / "a.yml", [{"url": "https://x/a1"}, {"url": "https://x/a2"}])
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    found = find_all(tmp_path)

    assert [d.source for d in found] == ["b.yaml", "nested/a.yml", "nested/a.yml"]
    assert [d.data["url"] for d in found] == ["https://x/b", "https://x/a1", "https://x/a2"]


def test_missing_directory_yields_nothing(tmp_path: Path) -> None:
    assert find_all(tmp_path / "absent") == []


def test_empty_file_yields_nothing(tmp_path: Path) -> None:
    (tmp_path / "empty.yaml").write_text("", encoding="utf-8")
    assert find_all(tmp_path) == []


def test_invalid_yaml_is_a_validation_error(tmp_path: Path) -> None:
    (tmp_path / "broken.yaml").write_text("url: [unterminated\n", encoding="utf-8")
    with pytest.raises(ValidationError) as exc:
        find_all(tmp_path)
    assert exc.value.context["source"] == "broken.yaml"


def test_scalar_document_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "scalar.yaml").write_text("just a string\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_file(tmp_path / "scalar.yaml")


def test_list_entries_must_be_mappings(tmp_path: Path) -> None:
    write_yaml(tmp_path / "list.yaml", [{"url": "https://x/a"}, "https://x/b"])
    with pytest.raises(ValidationError) as exc:
        load_file(tmp_path / "list.yaml")
    assert "entry #2" in str(exc.value)
