"""Process-wide alias table with deterministic name resolution."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterator, Mapping
import logging
import threading

from subjectalias.api import (
    AliasEntry,
    AliasKind,
    ResolvedOperation,
    StorageCell,
    validate_identifier,
)
from subjectalias.environment import HostEnvironment
from subjectalias.errors import AliasCycle, InvalidAliasTarget, NotFound

logger = logging.getLogger(__name__)


class AliasRegistry:
    """Registry mapping alternate names onto host operations and cells.

    The table is built in place during initialization and frozen by
    :meth:`publish`. After that every registration copies the snapshot,
    modifies the copy and swaps the reference under a writer lock, so
    readers never lock and never see a half-applied update.
    """

    def __init__(self, environment: HostEnvironment | None = None) -> None:
        self.environment = environment if environment is not None else HostEnvironment()
        self._lock = threading.Lock()
        self._building: dict[str, AliasEntry] | None = {}
        self._table: Mapping[str, AliasEntry] = self._building

    @property
    def published(self) -> bool:
        return self._building is None

    def publish(self) -> None:
        with self._lock:
            if self._building is None:
                return
            self._table = MappingProxyType(dict(self._building))
            self._building = None
        logger.info("Published alias table with %d entries", len(self._table))

    # ----------------- Registration -----------------

    def register_operation_alias(
        self,
        alias_name: str,
        target_name: str,
        doc: str | None = None,
        table: str | None = None,
    ) -> AliasEntry:
        entry = AliasEntry(alias_name, target_name, AliasKind.OPERATION, doc, table)
        return self._store(entry)

    def register_value_alias(
        self,
        alias_name: str,
        target_name: str,
        doc: str | None = None,
        table: str | None = None,
    ) -> AliasEntry:
        entry = AliasEntry(alias_name, target_name, AliasKind.VALUE, doc, table)
        for name in (target_name, alias_name):
            if not self.environment.is_aliasable(name):
                raise InvalidAliasTarget(alias_name, target_name, name)
        return self._store(entry)

    def register(self, entry: AliasEntry) -> AliasEntry:
        if entry.kind is AliasKind.VALUE:
            return self.register_value_alias(
                entry.alias_name, entry.target_name, entry.doc, entry.table
            )
        return self.register_operation_alias(
            entry.alias_name, entry.target_name, entry.doc, entry.table
        )

    def _store(self, entry: AliasEntry) -> AliasEntry:
        name = entry.alias_name
        with self._lock:
            previous = self._table.get(name)
            if previous is not None and previous.same_declaration(entry):
                return previous
            if previous is not None and (
                previous.target_name != entry.target_name or previous.kind is not entry.kind
            ):
                logger.warning(
                    "Alias %s redefined: %s %s -> %s %s",
                    name,
                    previous.kind.value,
                    previous.target_name,
                    entry.kind.value,
                    entry.target_name,
                )
            if self._shadows_host(entry):
                logger.warning(
                    "Alias %s hides the host %s of the same name", name, entry.kind.value
                )
            if self._building is not None:
                self._building[name] = entry
            else:
                updated = dict(self._table)
                updated[name] = entry
                self._table = MappingProxyType(updated)
        logger.debug(
            "Registered %s alias %s -> %s", entry.kind.value, name, entry.target_name
        )
        return entry

    def _shadows_host(self, entry: AliasEntry) -> bool:
        if entry.kind is AliasKind.VALUE:
            return self.environment.cell(entry.alias_name) is not None
        return self.environment.operation(entry.alias_name) is not None

    # ----------------- Resolution -----------------

    def alias_chain(
        self, name: str, kind: AliasKind | str = AliasKind.OPERATION
    ) -> tuple[str, ...]:
        """Names followed from ``name`` to its canonical name, both included."""
        _, chain = _chase(self._table, name, AliasKind.parse(kind))
        return chain

    def canonical_name(self, name: str, kind: AliasKind | str = AliasKind.OPERATION) -> str:
        """Follow alias links from ``name`` without consulting the host."""
        return self.alias_chain(name, kind)[-1]

    def resolve_operation(self, name: str) -> ResolvedOperation:
        validate_identifier(name)
        canonical, chain = _chase(self._table, name, AliasKind.OPERATION)
        function = self.environment.operation(canonical)
        if function is None:
            raise NotFound(name, AliasKind.OPERATION.value, canonical, chain)
        return ResolvedOperation(
            name=name, canonical_name=canonical, function=function, chain=chain
        )

    def resolve_value(self, name: str) -> StorageCell:
        validate_identifier(name)
        canonical, chain = _chase(self._table, name, AliasKind.VALUE)
        # Marks may be added after the alias was registered
        for alias_name, target_name in zip(chain, chain[1:]):
            for checked in (target_name, alias_name):
                if not self.environment.is_aliasable(checked):
                    raise InvalidAliasTarget(alias_name, target_name, checked)
        cell = self.environment.cell(canonical)
        if cell is None:
            raise NotFound(name, AliasKind.VALUE.value, canonical, chain)
        return cell

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        return self.resolve_operation(name).function(*args, **kwargs)

    def read(self, name: str) -> Any:
        return self.resolve_value(name).get()

    def write(self, name: str, value: Any) -> None:
        self.resolve_value(name).set(value)

    # ----------------- Discovery -----------------

    def list_aliases(
        self, prefix: str = "", kind: AliasKind | str | None = None
    ) -> "AliasListing":
        return AliasListing(self, prefix, AliasKind.parse(kind) if kind else None)

    def aliases_of(self, name: str, kind: AliasKind | str | None = None) -> tuple[str, ...]:
        """Alias names, in registration order, sharing the canonical name of ``name``.

        Aliases caught in a cycle are skipped; a cycle through ``name``
        itself raises :class:`AliasCycle`.
        """
        table = self._snapshot()
        kinds = (AliasKind.parse(kind),) if kind else tuple(AliasKind)
        canonical = {k: _chase(table, name, k)[0] for k in kinds}
        found: list[str] = []
        for entry in table.values():
            if entry.kind not in canonical:
                continue
            try:
                target, _ = _chase(table, entry.alias_name, entry.kind)
            except AliasCycle:
                continue
            if target == canonical[entry.kind]:
                found.append(entry.alias_name)
        return tuple(found)

    def get_entry(self, name: str) -> AliasEntry | None:
        return self._table.get(name)

    def entries(self) -> tuple[AliasEntry, ...]:
        return tuple(self._snapshot().values())

    def _snapshot(self) -> Mapping[str, AliasEntry]:
        if self._building is None:
            return self._table
        with self._lock:
            return dict(self._table)

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __len__(self) -> int:
        return len(self._table)


class AliasListing:
    """Lazy, restartable view of registered aliases under a prefix.

    Each iteration walks the snapshot current when the iteration starts,
    in registration order.
    """

    def __init__(self, registry: AliasRegistry, prefix: str, kind: AliasKind | None) -> None:
        self.registry = registry
        self.prefix = prefix
        self.kind = kind

    def __iter__(self) -> Iterator[AliasEntry]:
        for entry in self.registry._snapshot().values():
            if not entry.alias_name.startswith(self.prefix):
                continue
            if self.kind is not None and entry.kind is not self.kind:
                continue
            yield entry

    def names(self) -> list[str]:
        return [entry.alias_name for entry in self]


def _chase(
    table: Mapping[str, AliasEntry], name: str, kind: AliasKind
) -> tuple[str, tuple[str, ...]]:
    chain = [name]
    seen = {name}
    current = name
    while True:
        entry = table.get(current)
        if entry is None or entry.kind is not kind:
            return current, tuple(chain)
        current = entry.target_name
        chain.append(current)
        if current in seen:
            raise AliasCycle(name, chain)
        seen.add(current)
