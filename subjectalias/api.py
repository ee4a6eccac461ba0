"""Stable alias API contracts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
import re
import threading

OperationFn = Callable[..., Any]

_IDENTIFIER_RE = re.compile(r'^[^\s"#]+$')


class AliasKind(str, Enum):
    """What an alias stands for in the host namespace."""

    OPERATION = "operation"
    VALUE = "value"

    @classmethod
    def parse(cls, value: "AliasKind | str") -> "AliasKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid alias kind: {value!r}") from None


def validate_identifier(name: str, role: str = "name") -> str:
    """Return ``name`` if it is a well-formed identifier, else raise ValueError."""

    if not isinstance(name, str):
        raise ValueError(f"Alias {role} must be a string, got {type(name).__name__}")
    if not name:
        raise ValueError(f"Alias {role} cannot be empty")
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Alias {role} is not a valid identifier: {name!r}")
    return name


@dataclass(frozen=True)
class AliasEntry:
    """One ``alias_name -> target_name`` declaration."""

    alias_name: str
    target_name: str
    kind: AliasKind
    doc: str | None = None
    table: str | None = None

    def __post_init__(self) -> None:
        validate_identifier(self.alias_name, "alias_name")
        validate_identifier(self.target_name, "target_name")
        object.__setattr__(self, "kind", AliasKind.parse(self.kind))

    def same_declaration(self, other: "AliasEntry") -> bool:
        """True when both entries make the same observable declaration."""
        return (
            self.alias_name == other.alias_name
            and self.target_name == other.target_name
            and self.kind is other.kind
            and self.doc == other.doc
        )


class StorageCell:
    """A mutable storage location owned by the host environment.

    Value aliases hand out the target's cell object itself, so every name
    bound to it reads and writes the same location.
    """

    __slots__ = ("name", "_value", "_lock")

    def __init__(self, name: str, value: Any = None) -> None:
        self.name = name
        self._value = value
        self._lock = threading.Lock()

    def get(self) -> Any:
        return self._value

    def set(self, value: Any) -> None:
        with self._lock:
            self._value = value

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self.set(value)

    def __repr__(self) -> str:
        return f"StorageCell({self.name!r}, {self._value!r})"


@dataclass(frozen=True)
class ResolvedOperation:
    """Result of resolving an operation name.

    ``function`` is the host's callable itself; calling the resolved
    operation forwards arguments and exceptions untouched.
    """

    name: str
    canonical_name: str
    function: OperationFn
    chain: tuple[str, ...] = ()

    @property
    def is_alias(self) -> bool:
        return self.name != self.canonical_name

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.function(*args, **kwargs)
