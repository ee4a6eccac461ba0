"""
subjectalias Main module - command-line front end over the alias tables
"""

import logging
import sys
import time
from typing import Any, Optional

import typer

from subjectalias.api import AliasKind
from subjectalias.features import (
    Feature,
    FeatureRegistry,
    OperationResult,
    handle_list_aliases,
)
from subjectalias.parser import Declaration

# Module-level logger
logger = logging.getLogger("subjectalias.main")


# Create CLI app with Typer
app = typer.Typer(
    name="subjectalias",
    help="subjectalias - inspect subject-prefixed alias tables",
    add_completion=False,
)


# ----------------- Helper Functions -----------------


class ElapsedMsFormatter(logging.Formatter):
    """Formatter that shows milliseconds since program start, right-aligned for up to 9999 seconds."""
    def __init__(self, fmt=None, datefmt=None, *args, **kwargs):
        super().__init__(fmt, datefmt, *args, **kwargs)
        self.start_time = time.monotonic()
        self.width = 8

    def format(self, record):
        elapsed_ms = int((time.monotonic() - self.start_time) * 1000)
        if elapsed_ms < 10**7:
            elapsed = f"[{elapsed_ms:>{self.width}}ms]"
        else:
            elapsed = f"[{elapsed_ms}ms]"
        record.elapsed = elapsed
        return super().format(record)


VERBOSE_LEVEL = 15  # Between INFO (20) and DEBUG (10)
logging.addLevelName(VERBOSE_LEVEL, "VERBOSE")


def setup_logging(debug: bool = False, verbose: bool = False) -> None:
    """Set up logging configuration"""
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = VERBOSE_LEVEL
    else:
        log_level = logging.WARNING
    formatter = ElapsedMsFormatter('%(elapsed)s %(levelname)s %(name)s: %(message)s')
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.handlers = []  # Remove any existing handlers
    root.addHandler(handler)
    root.setLevel(log_level)


def _feature_or_exit(feature_name: str) -> Feature:
    feature = FeatureRegistry.get_feature(feature_name)
    if feature is None:
        logger.error("Unknown feature: %s", feature_name)
        raise typer.Exit(code=1)
    return feature


def _handle_cli_result(feature_name: str, result: OperationResult[Any]) -> Any:
    if not result.success:
        logger.error("%s failed: %s", feature_name, result.error or "Unknown error")
        raise typer.Exit(code=1)
    return result.data


def _validate_kind(kind: Optional[str]) -> Optional[str]:
    if kind is None:
        return None
    try:
        return AliasKind.parse(kind).value
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


# ----------------- CLI Commands -----------------


@app.command()
def version() -> None:
    """Show the subjectalias version"""
    setup_logging(False)
    data = _handle_cli_result("version", _feature_or_exit("version").handler())
    print(f"subjectalias {data.get('version', 'unknown')}")


@app.command("list-aliases")
def list_aliases(
    prefix: str = typer.Argument("", help="Only list aliases starting with this prefix"),
    kind: Optional[str] = typer.Option(None, "--kind", help="operation or value"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging (between info and debug)"),
) -> None:
    """List registered aliases in table syntax"""
    setup_logging(debug, verbose)
    data = _handle_cli_result(
        "list_aliases", handle_list_aliases(prefix=prefix, kind=_validate_kind(kind))
    )

    aliases = data.get("aliases", [])
    if not aliases:
        print(f"# No aliases found under prefix '{prefix}'.")
        return
    for item in aliases:
        declaration = Declaration(
            AliasKind(item["kind"]), item["alias_name"], item["target_name"], item["doc"]
        )
        print(declaration.to_syntax())
    print(f"# {len(aliases)} aliases from tables: {', '.join(data.get('tables', []))}")


@app.command()
def show(
    name: str = typer.Argument(..., help="Alias or canonical name"),
    kind: Optional[str] = typer.Option(None, "--kind", help="operation or value"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Show how a name resolves and which other names share its target"""
    setup_logging(debug)
    feature = _feature_or_exit("show")
    data = _handle_cli_result("show", feature.handler(name=name, kind=_validate_kind(kind)))

    print(f"{data['name']} ({data['kind']})")
    print(f"  resolves to: {' -> '.join(data['chain'])}")
    entry = data.get("entry")
    if entry is not None:
        if entry.get("doc"):
            print(f"  doc:         {entry['doc']}")
        if entry.get("table"):
            print(f"  table:       {entry['table']}")
    others = data.get("aliases", [])
    if others:
        print(f"  also known as: {', '.join(others)}")


@app.command()
def check(
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging (between info and debug)"),
) -> None:
    """Load every configured alias table and report problems"""
    setup_logging(debug, verbose)
    result = _feature_or_exit("check").handler()
    data = result.data or {}
    for problem in data.get("problems", []):
        print(f"  {problem}")
    print(
        f"{data.get('registered', 0)} aliases from {len(data.get('tables', []))} tables"
    )
    _handle_cli_result("check", result)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
