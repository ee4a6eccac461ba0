from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from subjectalias.api import AliasKind
from subjectalias.config import DEFAULT_TABLES_DIR
from subjectalias.environment import HostEnvironment
from subjectalias.errors import InvalidAliasTarget, TableSyntaxError
from subjectalias.loader import (
    AliasDeclaration,
    build_registry,
    discover_tables,
    load_declarations,
    load_default_tables,
    load_table_file,
)
from subjectalias.registry import AliasRegistry


@pytest.mark.unit
def test_declaration_rows_accept_tuples_and_mappings():
    short = AliasDeclaration.from_row(("string-split", "split-text"))
    full = AliasDeclaration.from_row(("buffer-count", "counter", "value", "Live buffers."))
    mapped = AliasDeclaration.from_row({"alias_name": "buffer-kill", "target_name": "kill-buffer"})

    assert short.kind is AliasKind.OPERATION
    assert full.kind is AliasKind.VALUE
    assert full.doc == "Live buffers."
    assert mapped.to_entry("rows").table == "rows"


@pytest.mark.unit
@pytest.mark.parametrize(
    "row",
    [
        ("", "split-text"),
        ("string-split", "has space"),
        ("string-split", "split-text", "macro"),
        {"alias_name": "a", "target_name": "b", "extra": 1},
    ],
)
def test_declaration_rows_are_validated(row):
    with pytest.raises(ValidationError):
        AliasDeclaration.from_row(row)


@pytest.mark.unit
def test_declaration_rows_with_wrong_shape_are_rejected():
    with pytest.raises(ValueError):
        AliasDeclaration.from_row(("only-one",))
    with pytest.raises(TypeError):
        AliasDeclaration.from_row("string-split split-text")


@pytest.mark.unit
def test_one_bad_row_does_not_stop_the_rest(registry: AliasRegistry):
    report = load_declarations(
        registry,
        [
            ("string-split", "split-text"),
            ("x", "reserved-internal", "value"),
            ("", "nothing"),
            ("counter-alias", "counter", "value"),
        ],
        table="embedded",
    )

    assert [entry.alias_name for entry in report.registered] == ["string-split", "counter-alias"]
    assert not report.ok
    assert [(f.line, f.alias_name) for f in report.failures] == [(2, "x"), (3, "")]
    assert isinstance(report.failures[0].error, InvalidAliasTarget)
    assert report.failures[0].describe().startswith("embedded:2: ")
    assert registry.read("counter-alias") == 0

    with pytest.raises(InvalidAliasTarget):
        report.raise_for_failures()


@pytest.mark.unit
def test_discover_tables_is_sorted_and_skips_private_files(table_dir: Path, tmp_path: Path):
    (table_dir / "_draft.aliases").write_text("operation a b\n", encoding="utf-8")
    (table_dir / "notes.txt").write_text("not a table", encoding="utf-8")
    single = tmp_path / "extra.aliases"
    single.write_text("operation extra-split split-text\n", encoding="utf-8")

    found = discover_tables([table_dir, single, tmp_path / "missing"])
    assert [path.name for path in found] == ["buffers.aliases", "strings.aliases", "extra.aliases"]


@pytest.mark.unit
def test_table_file_entries_carry_their_table(registry: AliasRegistry, table_dir: Path):
    report = load_table_file(registry, table_dir / "buffers.aliases")

    assert report.ok
    assert report.tables == ["buffers"]
    entry = registry.get_entry("buffer-count")
    assert entry.table == "buffers"
    assert entry.doc == "Number of live buffers."
    assert registry.call("buffer-kill", "scratch") is True


@pytest.mark.unit
def test_broken_table_is_reported_and_others_still_load(host: HostEnvironment, table_dir: Path):
    (table_dir / "broken.aliases").write_text("operation only-alias\n", encoding="utf-8")

    registry, report = build_registry(host, paths=[table_dir])

    assert registry.published
    assert report.tables == ["buffers", "strings"]
    assert len(report.failures) == 1
    assert report.failures[0].table == "broken"
    assert isinstance(report.failures[0].error, TableSyntaxError)
    assert registry.call("string-split", "a b") == ["a", "b"]


@pytest.mark.unit
def test_non_aliasable_entry_in_a_table_is_reported(host: HostEnvironment, table_dir: Path):
    (table_dir / "internal.aliases").write_text(
        "value  gc-internal  reserved-internal\nvalue  counter-too  counter\n",
        encoding="utf-8",
    )

    registry, report = build_registry(host, paths=[table_dir])

    assert [(f.table, f.line, f.alias_name) for f in report.failures] == [
        ("internal", 1, "gc-internal")
    ]
    assert "gc-internal" not in registry
    registry.write("counter-too", 5)
    assert registry.read("buffer-count") == 5


@pytest.mark.unit
def test_rows_are_applied_after_tables(host: HostEnvironment, table_dir: Path):
    registry, report = build_registry(
        host,
        paths=[table_dir],
        rows=[("string-split", "expand-file-name")],
    )

    assert report.ok
    assert registry.resolve_operation("string-split").canonical_name == "expand-file-name"


@pytest.mark.unit
def test_missing_configured_root_is_reported(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("SUBJECTALIAS_TABLES_DIR", str(tmp_path / "nowhere"))
    monkeypatch.delenv("SUBJECTALIAS_EXTRA_TABLES", raising=False)

    report = load_default_tables(AliasRegistry())
    assert len(report.failures) == 1
    assert isinstance(report.failures[0].error, FileNotFoundError)


@pytest.mark.unit
def test_bundled_tables_load_cleanly(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("SUBJECTALIAS_TABLES_DIR", raising=False)
    monkeypatch.delenv("SUBJECTALIAS_EXTRA_TABLES", raising=False)

    registry, report = build_registry()

    assert report.ok, [failure.describe() for failure in report.failures]
    assert len(report.tables) == len(list(DEFAULT_TABLES_DIR.glob("*.aliases")))
    assert registry.canonical_name("buffer-kill") == "kill-buffer"
    assert registry.canonical_name("file-name-expand") == "expand-file-name"
    assert registry.get_entry("buffer-coding").kind is AliasKind.VALUE
    assert set(registry.aliases_of("intern")) == {"string-to-symbol", "symbol-intern"}
    assert all(name.startswith("buffer-") for name in registry.list_aliases("buffer-").names())
