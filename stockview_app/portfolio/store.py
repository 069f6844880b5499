"""Portfolio entry repositories."""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol, Union, runtime_checkable

import orjson

from stockview_app.data.models import PortfolioEntry
from stockview_app.data.parsers import parse_portfolio_entry
from stockview_app.errors import EntryNotFoundError, PersistenceError


@runtime_checkable
class PortfolioRepository(Protocol):
    """Key-value storage of portfolio entries by id."""

    def list(self) -> list[PortfolioEntry]:
        ...

    def get(self, entry_id: str) -> Optional[PortfolioEntry]:
        ...

    def add(self, entry_data: dict[str, Any]) -> PortfolioEntry:
        ...

    def update(self, entry_id: str, changes: dict[str, Any]) -> PortfolioEntry:
        ...

    def delete(self, entry_id: str) -> bool:
        ...


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def entries_by_symbol(entries: list[PortfolioEntry], symbol: str) -> list[PortfolioEntry]:
    """Entries for one symbol, matched case-insensitively."""
    wanted = symbol.upper()
    return [entry for entry in entries if entry.symbol.upper() == wanted]


class BasePortfolioStore(ABC):
    """Shared add/update/delete logic over a load/save backend."""

    def __init__(self, today: Optional[date] = None):
        self.logger = logging.getLogger("portfolio.store")
        self._lock = threading.Lock()
        self._today = today

    @abstractmethod
    def _load(self) -> list[PortfolioEntry]:
        ...

    @abstractmethod
    def _save(self, entries: list[PortfolioEntry]) -> None:
        ...

    def list(self) -> list[PortfolioEntry]:
        with self._lock:
            return self._load()

    def get(self, entry_id: str) -> Optional[PortfolioEntry]:
        return next((entry for entry in self.list() if entry.id == entry_id), None)

    def add(self, entry_data: dict[str, Any]) -> PortfolioEntry:
        """Validate and store a new entry, assigning its id and creation time."""
        with self._lock:
            entries = self._load()
            document = dict(entry_data)
            document["id"] = uuid.uuid4().hex
            document["createdAt"] = _now_iso()
            document.pop("updatedAt", None)
            entry = parse_portfolio_entry(document, today=self._today)
            entries.append(entry)
            self._save(entries)

        self.logger.info(f"Added portfolio entry {entry.id} for {entry.symbol}")
        return entry

    def update(self, entry_id: str, changes: dict[str, Any]) -> PortfolioEntry:
        """Apply changes to an entry, keeping its id and creation time."""
        with self._lock:
            entries = self._load()
            index = next((i for i, entry in enumerate(entries) if entry.id == entry_id), None)
            if index is None:
                raise EntryNotFoundError(f"Entry not found: {entry_id}", entry_id=entry_id,
                                         operation="update")

            existing = entries[index]
            document = {**existing.to_dict(), **changes}
            document["id"] = existing.id
            document["createdAt"] = existing.created_at
            document["updatedAt"] = _now_iso()
            entries[index] = parse_portfolio_entry(document, today=self._today)
            self._save(entries)

        self.logger.info(f"Updated portfolio entry {entry_id}")
        return entries[index]

    def delete(self, entry_id: str) -> bool:
        """Remove an entry; returns False when the id is unknown."""
        with self._lock:
            entries = self._load()
            remaining = [entry for entry in entries if entry.id != entry_id]
            if len(remaining) == len(entries):
                return False
            self._save(remaining)

        self.logger.info(f"Deleted portfolio entry {entry_id}")
        return True

    def clear(self) -> None:
        with self._lock:
            self._save([])


class InMemoryPortfolioStore(BasePortfolioStore):
    """Entries held in process memory."""

    def __init__(self, entries: Optional[list[PortfolioEntry]] = None, today: Optional[date] = None):
        super().__init__(today=today)
        self._entries = list(entries or [])

    def _load(self) -> list[PortfolioEntry]:
        return list(self._entries)

    def _save(self, entries: list[PortfolioEntry]) -> None:
        self._entries = list(entries)


class JsonFilePortfolioStore(BasePortfolioStore):
    """Entries persisted as a JSON array in a single file."""

    def __init__(self, path: Union[str, Path] = "portfolio.json", today: Optional[date] = None):
        super().__init__(today=today)
        self.path = Path(path)

    def _load(self) -> list[PortfolioEntry]:
        if not self.path.exists():
            return []

        try:
            documents = orjson.loads(self.path.read_bytes())
        except OSError as e:
            raise PersistenceError(f"Failed to read portfolio: {e}", operation="read",
                                   target=str(self.path))
        except orjson.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt portfolio file: {e}", operation="read",
                                   target=str(self.path))

        if not isinstance(documents, list):
            raise PersistenceError("Portfolio file must contain a JSON array", operation="read",
                                   target=str(self.path))

        try:
            return [PortfolioEntry.from_dict(document) for document in documents]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"Invalid portfolio entry document: {e}", operation="read",
                                   target=str(self.path))

    def _save(self, entries: list[PortfolioEntry]) -> None:
        payload = orjson.dumps([entry.to_dict() for entry in entries], option=orjson.OPT_INDENT_2)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(payload)
            temp_path.replace(self.path)
        except OSError as e:
            raise PersistenceError(f"Failed to write portfolio: {e}", operation="write",
                                   target=str(self.path))
