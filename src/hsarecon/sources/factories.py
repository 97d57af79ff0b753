"""Factory functions for creating record sources."""

from pathlib import Path
from typing import Optional

from hsarecon.sources.csv_source import CSVRecordSource


def create_csv_source(data_dir: Optional[str | Path] = None) -> CSVRecordSource:
    """Create a CSV record source.

    Args:
        data_dir: Directory holding the CSV files. If None, uses
            HSARECON_DATA_DIR, then defaults to ~/.hsarecon

    Returns:
        CSVRecordSource (not yet loaded)
    """
    if data_dir is None:
        from hsarecon.config import get_settings

        data_dir = get_settings().data_dir

    return CSVRecordSource(Path(data_dir).expanduser())
