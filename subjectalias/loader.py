"""Load alias declarations from table files and embedding-application rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from collections.abc import Mapping
from typing import Any, Iterable, Optional, Sequence
import logging

from pydantic import BaseModel, ConfigDict, field_validator

from subjectalias.api import AliasEntry, AliasKind, validate_identifier
from subjectalias.config import TABLE_SUFFIX, resolve_table_paths
from subjectalias.environment import HostEnvironment
from subjectalias.errors import AliasError, TableSyntaxError
from subjectalias.parser import parse_table
from subjectalias.registry import AliasRegistry

logger = logging.getLogger(__name__)

_ROW_FIELDS = ("alias_name", "target_name", "kind", "doc")


class AliasDeclaration(BaseModel):
    """Validated alias row supplied by the embedding application."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    alias_name: str
    target_name: str
    kind: AliasKind = AliasKind.OPERATION
    doc: Optional[str] = None

    @field_validator("alias_name", "target_name")
    @classmethod
    def check_identifier(cls, value: str) -> str:
        return validate_identifier(value)

    @field_validator("kind", mode="before")
    @classmethod
    def check_kind(cls, value: Any) -> AliasKind:
        return AliasKind.parse(value)

    @classmethod
    def from_row(cls, row: Any) -> "AliasDeclaration":
        if isinstance(row, cls):
            return row
        if isinstance(row, Mapping):
            return cls.model_validate(dict(row))
        if isinstance(row, (tuple, list)):
            if not 2 <= len(row) <= len(_ROW_FIELDS):
                raise ValueError(
                    f"Alias row must have 2 to {len(_ROW_FIELDS)} fields, got {len(row)}"
                )
            return cls.model_validate(dict(zip(_ROW_FIELDS, row)))
        raise TypeError(f"Unsupported alias row: {type(row).__name__}")

    def to_entry(self, table: str | None = None) -> AliasEntry:
        return AliasEntry(self.alias_name, self.target_name, self.kind, self.doc, table)


@dataclass(frozen=True)
class LoadFailure:
    """A table or a single declaration that could not be registered."""

    table: str | None
    line: int | None
    alias_name: str | None
    error: Exception

    def describe(self) -> str:
        where = self.table or "<rows>"
        if self.line is not None:
            where = f"{where}:{self.line}"
        return f"{where}: {self.error}"


@dataclass
class LoadReport:
    """Outcome of loading one or more alias sources."""

    registered: list[AliasEntry] = field(default_factory=list)
    failures: list[LoadFailure] = field(default_factory=list)
    tables: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def fail(
        self,
        table: str | None,
        line: int | None,
        alias_name: str | None,
        error: Exception,
    ) -> None:
        failure = LoadFailure(table, line, alias_name, error)
        self.failures.append(failure)
        logger.warning("Skipping alias declaration %s", failure.describe())

    def raise_for_failures(self) -> None:
        if self.failures:
            raise self.failures[0].error


def discover_tables(roots: Iterable[Path]) -> list[Path]:
    """Table files under ``roots`` in deterministic order.

    Directories contribute their ``*.aliases`` files sorted by name,
    skipping names starting with ``_``; a root that is a file is used as is.
    """
    found: list[Path] = []
    for root in roots:
        root = Path(root)
        if root.is_file():
            found.append(root)
            continue
        if not root.is_dir():
            continue
        for item in sorted(root.glob(f"*{TABLE_SUFFIX}"), key=lambda p: p.name):
            if item.name.startswith("_"):
                continue
            found.append(item)
    return found


def load_declarations(
    registry: AliasRegistry,
    rows: Iterable[Any],
    table: str | None = None,
    report: LoadReport | None = None,
) -> LoadReport:
    """Register embedding-application rows; bad rows are reported, not fatal."""
    report = report if report is not None else LoadReport()
    for index, row in enumerate(rows, start=1):
        try:
            declaration = AliasDeclaration.from_row(row)
            entry = registry.register(declaration.to_entry(table))
        except (AliasError, ValueError, TypeError) as exc:
            report.fail(table, index, _row_alias_name(row), exc)
            continue
        report.registered.append(entry)
    return report


def load_table_file(
    registry: AliasRegistry, path: Path, report: LoadReport | None = None
) -> LoadReport:
    report = report if report is not None else LoadReport()
    table = Path(path).stem
    try:
        declarations = parse_table(path)
    except TableSyntaxError as exc:
        report.fail(table, exc.line, None, exc)
        return report
    except OSError as exc:
        report.fail(table, None, None, exc)
        return report

    report.tables.append(table)
    for declaration in declarations:
        try:
            entry = registry.register(declaration.to_entry(table))
        except (AliasError, ValueError) as exc:
            report.fail(table, declaration.line, declaration.alias_name, exc)
            continue
        report.registered.append(entry)
    return report


def load_tables(
    registry: AliasRegistry, paths: Sequence[Path], report: LoadReport | None = None
) -> LoadReport:
    report = report if report is not None else LoadReport()
    for path in paths:
        load_table_file(registry, path, report)
    return report


def load_default_tables(registry: AliasRegistry, report: LoadReport | None = None) -> LoadReport:
    """Load every table found under the configured table roots."""
    report = report if report is not None else LoadReport()
    roots = resolve_table_paths()
    for root in roots:
        if not root.exists():
            report.fail(str(root), None, None, FileNotFoundError(f"No alias tables at {root}"))
    return load_tables(registry, discover_tables(roots), report)


def build_registry(
    environment: HostEnvironment | None = None,
    paths: Sequence[Path] | None = None,
    rows: Iterable[Any] | None = None,
) -> tuple[AliasRegistry, LoadReport]:
    """Run the initialization phase and publish the resulting registry.

    ``paths`` overrides the configured table roots; ``rows`` are applied
    after the tables so the embedding application has the last word.
    """
    registry = AliasRegistry(environment)
    if paths is None:
        report = load_default_tables(registry)
    else:
        report = load_tables(registry, discover_tables(paths))
    if rows is not None:
        load_declarations(registry, rows, report=report)
    registry.publish()
    logger.info(
        "Loaded %d alias declarations from %d tables (%d failures)",
        len(report.registered),
        len(report.tables),
        len(report.failures),
    )
    return registry, report


def _row_alias_name(row: Any) -> str | None:
    if isinstance(row, AliasDeclaration):
        return row.alias_name
    if isinstance(row, Mapping):
        value = row.get("alias_name")
    elif isinstance(row, (tuple, list)) and row:
        value = row[0]
    else:
        return None
    return value if isinstance(value, str) else None
