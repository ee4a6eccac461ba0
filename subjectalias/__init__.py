"""Subject-prefixed alternate names for host primitives."""

from subjectalias.api import AliasEntry, AliasKind, ResolvedOperation, StorageCell
from subjectalias.environment import HostEnvironment
from subjectalias.errors import (
    AliasCycle,
    AliasError,
    InvalidAliasTarget,
    NotFound,
    TableSyntaxError,
)
from subjectalias.registry import AliasListing, AliasRegistry
from subjectalias.version import __version__

__all__ = [
    "AliasCycle",
    "AliasEntry",
    "AliasError",
    "AliasKind",
    "AliasListing",
    "AliasRegistry",
    "HostEnvironment",
    "InvalidAliasTarget",
    "NotFound",
    "ResolvedOperation",
    "StorageCell",
    "TableSyntaxError",
    "__version__",
]
