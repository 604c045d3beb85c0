"""Owned handle on the in-memory listing dataset."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import requests

from estate_map.etl.csv_tokenizer import parse_csv
from estate_map.etl.transform import normalize_rows
from estate_map.models import PropertyRecord

logger = logging.getLogger(__name__)
_SESSION = requests.Session()


class DatasetError(RuntimeError):
    """Raised when the CSV source cannot be read."""


@dataclass(frozen=True)
class Dataset:
    records: Tuple[PropertyRecord, ...] = ()
    source: str = ""
    loaded_at: Optional[datetime] = None
    _by_id: Dict[str, PropertyRecord] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", {record.id: record for record in self.records})

    def __len__(self) -> int:
        return len(self.records)

    def get(self, record_id: str) -> Optional[PropertyRecord]:
        return self._by_id.get(record_id)

    @property
    def invalid_coordinate_count(self) -> int:
        return sum(1 for record in self.records if not record.has_valid_coordinates)


def fetch_csv(url: str, timeout: int = 10) -> str:
    try:
        response = _SESSION.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise DatasetError(f"Failed to fetch CSV from {url}: {exc}") from exc
    return response.content.decode("utf-8", errors="replace")


class DatasetHandle:
    """Holds the current dataset; a reload swaps the whole reference.

    Readers grab ``handle.current`` once and keep working on that snapshot even
    if a newer load lands in the meantime.
    """

    def __init__(self, source_name: str = "csv", delimiter: str = ",") -> None:
        self.source_name = source_name
        self.delimiter = delimiter
        self._current = Dataset()

    @property
    def current(self) -> Dataset:
        return self._current

    @property
    def records(self) -> Tuple[PropertyRecord, ...]:
        return self._current.records

    def replace(self, records: Sequence[PropertyRecord], source: str = "") -> Dataset:
        dataset = Dataset(records=tuple(records), source=source, loaded_at=datetime.now(timezone.utc))
        self._current = dataset
        logger.info(
            "Dataset replaced: source=%s records=%d invalid_coordinates=%d",
            source or "<memory>",
            len(dataset),
            dataset.invalid_coordinate_count,
        )
        return dataset

    def load_text(self, csv_text: str, source: str = "") -> Dataset:
        raw_rows = parse_csv(csv_text, self.delimiter)
        records = normalize_rows(raw_rows, self.source_name)
        logger.info("Parsed %d rows into %d records", len(raw_rows), len(records))
        return self.replace(records, source)

    def load_file(self, path: str) -> Dataset:
        try:
            csv_text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise DatasetError(f"Failed to read CSV file {path}: {exc}") from exc
        return self.load_text(csv_text, source=str(path))

    def load_url(self, url: str, timeout: int = 10) -> Dataset:
        return self.load_text(fetch_csv(url, timeout=timeout), source=url)

    def find(self, record_id: str) -> Optional[PropertyRecord]:
        return self._current.get(record_id)
