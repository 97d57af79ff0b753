"""Record sources that supply invoices, payments and HSA accounts."""

from hsarecon.sources.base import RecordSource
from hsarecon.sources.csv_source import CSVRecordSource
from hsarecon.sources.factories import create_csv_source
from hsarecon.sources.memory import InMemoryRecordSource

__all__ = ["RecordSource", "CSVRecordSource", "InMemoryRecordSource", "create_csv_source"]
