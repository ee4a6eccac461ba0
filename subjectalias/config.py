"""Environment-driven configuration of where alias tables are read from."""

from __future__ import annotations

from pathlib import Path
import os

TABLES_DIR_ENV = "SUBJECTALIAS_TABLES_DIR"
EXTRA_TABLES_ENV = "SUBJECTALIAS_EXTRA_TABLES"

DEFAULT_TABLES_DIR = Path(__file__).resolve().parent / "tables"
TABLE_SUFFIX = ".aliases"


def resolve_table_paths() -> tuple[Path, ...]:
    """Resolve table directories (or single files) from environment variables."""
    configured = os.environ.get(TABLES_DIR_ENV, "").strip()
    if configured:
        primary = Path(configured).expanduser().resolve()
    else:
        primary = DEFAULT_TABLES_DIR

    extras_raw = os.environ.get(EXTRA_TABLES_ENV, "")
    roots: list[Path] = [primary]
    for token in extras_raw.split(","):
        stripped = token.strip()
        if not stripped:
            continue
        roots.append(Path(stripped).expanduser().resolve())

    return tuple(dict.fromkeys(roots))
