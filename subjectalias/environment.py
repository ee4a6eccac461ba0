"""Host namespace of operations and value cells that aliases point at."""

from __future__ import annotations

import logging
import threading

from subjectalias.api import OperationFn, StorageCell, validate_identifier

logger = logging.getLogger(__name__)


class HostEnvironment:
    """Global namespace supplied by the embedding application.

    The registry never copies anything out of it: every resolution looks
    the canonical name up here, so operations and cells defined after an
    alias was registered are picked up.

    Non-aliasable marks are checked when a value alias is registered and
    again on every resolution, so marking a cell later cuts off aliases
    that already point at it.
    """

    def __init__(self) -> None:
        self._operations: dict[str, OperationFn] = {}
        self._cells: dict[str, StorageCell] = {}
        self._non_aliasable: set[str] = set()
        self._lock = threading.Lock()

    def define_operation(self, name: str, function: OperationFn) -> None:
        validate_identifier(name)
        if not callable(function):
            raise TypeError(f"Operation {name} must be callable, got {type(function).__name__}")
        with self._lock:
            self._operations[name] = function
        logger.debug("Defined operation %s", name)

    def define_value(self, name: str, value: object = None, aliasable: bool = True) -> StorageCell:
        validate_identifier(name)
        with self._lock:
            cell = self._cells.get(name)
            if cell is None:
                cell = StorageCell(name, value)
                self._cells[name] = cell
            else:
                cell.set(value)
            if not aliasable:
                self._non_aliasable.add(name)
        return cell

    def mark_non_aliasable(self, name: str) -> None:
        validate_identifier(name)
        with self._lock:
            self._non_aliasable.add(name)

    def is_aliasable(self, name: str) -> bool:
        return name not in self._non_aliasable

    def operation(self, name: str) -> OperationFn | None:
        return self._operations.get(name)

    def cell(self, name: str) -> StorageCell | None:
        return self._cells.get(name)

    def operation_names(self) -> tuple[str, ...]:
        return tuple(sorted(self._operations))

    def value_names(self) -> tuple[str, ...]:
        return tuple(sorted(self._cells))
