"""JSON file sink for exporting and re-loading a ledger."""

import json
import logging
from pathlib import Path
from typing import Any

from hafta_ledger.exceptions import SinkError
from hafta_ledger.sinks.serialization import parse_loan, parse_transaction, parse_user, to_dict
from hafta_ledger.store import LedgerStore

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Output records to one JSON file per entity type."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to ``<entity_type>.json``."""
        file_path = self.output_dir / f"{entity_type}.json"
        data = [to_dict(record) for record in records]

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2 if self.pretty else None, ensure_ascii=False)
        except OSError as e:
            raise SinkError(f"Failed to write {file_path}: {e}") from e

        self._counts[entity_type] = len(records)

    def write_store(self, store: LedgerStore) -> None:
        """Write users, loans and transactions from a store."""
        self.write_batch("users", list(store.users.values()))
        self.write_batch("loans", list(store.loans.values()))
        self.write_batch("transactions", list(store.transactions.values()))

    def close(self) -> None:
        """Log a summary of what was written."""
        logger.info("JSON files written to: %s", self.output_dir)
        for entity_type, count in self._counts.items():
            logger.info("  %s: %d records", entity_type, count)


def _read_records(file_path: Path) -> list[dict]:
    if not file_path.exists():
        return []
    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SinkError(f"Failed to read {file_path}: {e}") from e
    if not isinstance(data, list):
        raise SinkError(f"{file_path} must contain a JSON list")
    return data


def load_store(input_dir: str | Path) -> LedgerStore:
    """Rebuild a :class:`LedgerStore` from files written by :class:`JsonFileSink`.

    Raises
    ------
    SinkError
        If a file cannot be read.
    ValidationError
        If a record does not parse into a typed model.
    ReferentialIntegrityError
        If a loan or transaction points at a missing parent.
    """
    input_dir = Path(input_dir)
    store = LedgerStore()

    for record in _read_records(input_dir / "users.json"):
        store.add_user(parse_user(record))
    for record in _read_records(input_dir / "loans.json"):
        store.add_loan(parse_loan(record))
    for record in _read_records(input_dir / "transactions.json"):
        store.add_transaction(parse_transaction(record))

    logger.info("Loaded %s from %s", store.summary(), input_dir)
    return store
