"""Output sinks for exporting ledger data."""

from hafta_ledger.sinks.json_file import JsonFileSink, load_store

__all__ = ["JsonFileSink", "load_store"]
