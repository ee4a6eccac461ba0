"""
Error kinds raised by alias registration, resolution and table parsing.
"""

from __future__ import annotations

from typing import Sequence


class AliasError(Exception):
    """Base error carrying the chain of names followed before failing."""

    def __init__(self, msg: str, chain: Sequence[str] | None = None):
        self.msg = msg
        self.chain = tuple(chain or ())
        super().__init__(self.format_message())

    def format_message(self) -> str:
        if len(self.chain) < 2:
            return self.msg
        return f"{self.msg} (via {' -> '.join(self.chain)})"


class NotFound(AliasError, LookupError):
    """Name is neither a registered alias nor a name the host defines."""

    def __init__(
        self,
        name: str,
        kind: str,
        canonical_name: str | None = None,
        chain: Sequence[str] | None = None,
    ):
        self.name = name
        self.kind = kind
        self.canonical_name = canonical_name or name
        if self.canonical_name == name:
            msg = f"Unknown {kind}: {name}"
        else:
            msg = f"Unknown {kind}: {name} resolves to undefined {self.canonical_name}"
        super().__init__(msg, chain)


class InvalidAliasTarget(AliasError):
    """Value alias touches storage the host marked non-aliasable."""

    def __init__(
        self, alias_name: str, target_name: str, internal_name: str | None = None
    ):
        self.alias_name = alias_name
        self.target_name = target_name
        self.internal_name = internal_name or target_name
        super().__init__(
            f"Cannot alias {alias_name} to {target_name}: "
            f"{self.internal_name} is internal storage and cannot be aliased"
        )


class AliasCycle(AliasError):
    """Following alias links would never reach a canonical name."""

    def __init__(self, name: str, chain: Sequence[str]):
        self.name = name
        super().__init__(f"Alias cycle while resolving {name}", chain)


class TableSyntaxError(AliasError):
    """Malformed alias table file."""

    def __init__(self, table: str, line: int | None, detail: str):
        self.table = table
        self.line = line
        self.detail = detail
        where = f"{table}:{line}" if line is not None else table
        super().__init__(f"{where}: {detail}")
