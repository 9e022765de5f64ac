"""The file-access log and its statistics report."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from .blockfile import BlockFile
from .records import LogEntry

LOG_BLOCKING_FACTOR = 7
OPERATIONS = ("upis", "brisanje", "modifikacija", "trazenje")


@dataclass
class OperationStats:
    """Number of log entries and accesses recorded for one operation."""

    operation: str
    record_count: int = 0
    access_count: int = 0

    @property
    def average(self) -> float:
        return self.access_count / self.record_count if self.record_count else 0.0


class AccessLog:
    """A blocked file recording how many accesses each operation took."""

    def __init__(self, path="log.dat") -> None:
        self._file: BlockFile[LogEntry] = BlockFile(path, LogEntry, LOG_BLOCKING_FACTOR)
        self._next_id: int | None = None

    @property
    def path(self) -> Path:
        return self._file.path

    def create(self) -> None:
        """Start an empty log file."""
        self._file.create()
        self._next_id = 1

    def record(self, operation: str, access_count: int, record_id: int) -> LogEntry:
        """Append an entry, creating the log file if it does not exist."""
        if not self.path.exists():
            self.create()
        if self._next_id is None:
            self._next_id = max((entry.entry_id for _, _, entry in self.entries()), default=0) + 1
        entry = LogEntry.unpack(
            LogEntry(self._next_id, record_id, operation, access_count).pack()
        )
        self._next_id += 1
        self._file.append(entry.entry_id, entry)
        return entry

    def entries(self) -> Iterator[tuple[int, int, LogEntry]]:
        """Yield (block, position, entry) for every live entry."""
        for block, position, slot in self._file.active():
            yield block, position, slot.payload

    def find(self, entry_id: int) -> LogEntry | None:
        slot = self._file.find(entry_id)
        return None if slot is None else slot.payload

    def report(self) -> list[OperationStats]:
        """Totals per known operation, in a fixed order."""
        stats = {operation: OperationStats(operation) for operation in OPERATIONS}
        for _, _, entry in self.entries():
            current = stats.get(entry.operation)
            if current is not None:
                current.record_count += 1
                current.access_count += entry.access_count
        return list(stats.values())


def format_entries(entries: Iterable[tuple[int, int, LogEntry]]) -> str:
    lines = []
    for block, position, entry in entries:
        lines += [
            f"ID: {entry.entry_id}",
            f"ID za pristup: {entry.record_id}",
            f"Naziv operacije: {entry.operation}",
            f"Broj pristupa: {entry.access_count}",
            f"Adresa bloka: {block}",
            f"Broj sloga: {position}",
        ]
    return "".join(line + "\n" for line in lines)


def format_report(stats: Iterable[OperationStats], threshold: int) -> str:
    lines = []
    for item in stats:
        if item.operation == "trazenje" and item.average > threshold:
            lines.append(
                f"Prosečan broj pristupa za operaciju 'trazenje' je {item.average:.2f}, "
                f"što je veće od praga {threshold}."
            )
        lines.append(
            f"Operacija: {item.operation}, Broj slogova: {item.record_count}, "
            f"Broj pristupa: {item.access_count}, "
            f"Prosečan broj pristupa: {item.average:.2f}"
        )
    return "".join(line + "\n" for line in lines)