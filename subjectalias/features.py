"""
This module defines the subjectalias features using a unified registry system.
The CLI dispatches every command through the handlers registered here.
"""

from typing import (
    Dict,
    Any,
    Callable,
    Optional,
    TypeVar,
    Generic,
)
from dataclasses import dataclass
import logging

from subjectalias.api import AliasEntry, AliasKind
from subjectalias.errors import AliasError
from subjectalias.loader import LoadReport, build_registry
from subjectalias.registry import AliasRegistry

logger = logging.getLogger("subjectalias.features")

T = TypeVar("T")


class OperationResult(Generic[T]):
    """Wrapper for operation results with success/error handling"""

    def __init__(
        self, success: bool, data: Optional[T] = None, error: Optional[str] = None
    ):
        self.success = success
        self.data = data
        self.error = error

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, data: Optional[T] = None) -> "OperationResult[T]":
        return cls(success=False, data=data, error=error)


@dataclass
class Feature:
    """A named operation exposed by the command-line front end"""

    name: str
    description: str
    handler: Callable
    cli_options: Optional[Dict[str, Any]] = None


class FeatureRegistry:
    """Registry for all subjectalias features"""

    _features: Dict[str, Feature] = {}

    @classmethod
    def register(cls, feature: Feature) -> Feature:
        """Register a new feature"""
        cls._features[feature.name] = feature
        return feature

    @classmethod
    def get_feature(cls, name: str) -> Optional[Feature]:
        """Get a feature by name"""
        return cls._features.get(name)

    @classmethod
    def get_all_features(cls) -> Dict[str, Feature]:
        """Get all registered features"""
        return cls._features.copy()


# ----------------- Feature Handlers -----------------


def _load_registry() -> tuple[AliasRegistry, LoadReport]:
    return build_registry()


def _entry_payload(entry: AliasEntry) -> Dict[str, Any]:
    return {
        "alias_name": entry.alias_name,
        "target_name": entry.target_name,
        "kind": entry.kind.value,
        "doc": entry.doc,
        "table": entry.table,
    }


def handle_version(**kwargs) -> OperationResult[Dict[str, str]]:
    """Handle version request"""
    from subjectalias.version import get_version

    return OperationResult[Dict[str, str]](
        success=True, data={"version": get_version()}
    )


def handle_list_aliases(
    prefix: str = "",
    kind: Optional[str] = None,
    **kwargs,
) -> OperationResult[Dict[str, Any]]:
    """Handle listing registered aliases under a prefix"""
    try:
        registry, report = _load_registry()
        aliases = [
            _entry_payload(entry) for entry in registry.list_aliases(prefix, kind)
        ]
        return OperationResult.ok(
            {
                "aliases": aliases,
                "prefix": prefix,
                "kind": kind,
                "tables": list(report.tables),
                "failures": len(report.failures),
            }
        )
    except ValueError as e:
        return OperationResult.fail(f"Failed to list aliases: {str(e)}")


def handle_show(
    name: str,
    kind: Optional[str] = None,
    **kwargs,
) -> OperationResult[Dict[str, Any]]:
    """Handle describing one name: its chain, canonical name and siblings"""
    try:
        registry, _ = _load_registry()
        entry = registry.get_entry(name)
        if kind is not None:
            selected = AliasKind.parse(kind)
        elif entry is not None:
            selected = entry.kind
        else:
            selected = AliasKind.OPERATION

        chain = registry.alias_chain(name, selected)
        return OperationResult.ok(
            {
                "name": name,
                "kind": selected.value,
                "entry": _entry_payload(entry) if entry is not None else None,
                "chain": list(chain),
                "canonical_name": chain[-1],
                "aliases": [
                    alias for alias in registry.aliases_of(name, selected) if alias != name
                ],
            }
        )
    except (AliasError, ValueError) as e:
        return OperationResult.fail(str(e))


def handle_check(**kwargs) -> OperationResult[Dict[str, Any]]:
    """Handle validating every configured alias table"""
    registry, report = _load_registry()
    cycles = []
    for entry in registry.entries():
        try:
            registry.alias_chain(entry.alias_name, entry.kind)
        except AliasError as e:
            cycles.append(str(e))

    problems = [failure.describe() for failure in report.failures] + cycles
    logger.info("Checked %d aliases, %d problems", len(registry), len(problems))
    data = {
        "tables": list(report.tables),
        "registered": len(registry),
        "problems": problems,
    }
    if problems:
        return OperationResult.fail(f"{len(problems)} alias problems found", data)
    return OperationResult.ok(data)


# Register all features
version_feature = FeatureRegistry.register(
    Feature(
        name="version",
        description="Get the subjectalias version",
        handler=handle_version,
    )
)

list_aliases_feature = FeatureRegistry.register(
    Feature(
        name="list_aliases",
        description="List registered aliases",
        handler=handle_list_aliases,
        cli_options={
            "prefix": {
                "type": str,
                "required": False,
                "default": "",
                "help": "Only list aliases starting with this prefix",
            },
            "kind": {
                "type": str,
                "required": False,
                "help": "Restrict to 'operation' or 'value' aliases",
            },
        },
    )
)

show_feature = FeatureRegistry.register(
    Feature(
        name="show",
        description="Describe how a name resolves",
        handler=handle_show,
        cli_options={
            "name": {
                "type": str,
                "required": True,
                "help": "Alias or canonical name",
            },
            "kind": {
                "type": str,
                "required": False,
                "help": "Resolve as 'operation' or 'value'",
            },
        },
    )
)

check_feature = FeatureRegistry.register(
    Feature(
        name="check",
        description="Validate the configured alias tables",
        handler=handle_check,
    )
)
