"""Sheet row sources.

Rows reach the normalizer as typed ``Row`` values regardless of where they
came from. Two sources are supported:

- CSV exports of the sheets (one ``<Sheet name>.csv`` per sheet), read
  with pandas.
- Google Visualization (gviz) JSON payloads, as returned by the sheet
  query endpoint or a proxy in front of it.

Fetching and caching the payloads is left to the caller.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from configurator.canon import clean_str, normalize_header
from configurator.config import DATA_DIR
from configurator.logging_config import get_logger
from configurator.models import ColumnSpec, Row

__all__ = [
    "build_header_index",
    "rows_from_records",
    "load_sheet_csv",
    "parse_gviz_payload",
    "filter_rows_by_key",
    "CsvSheetSource",
]

logger = get_logger("sheets")


def build_header_index(headers: Sequence[Any]) -> Optional[Dict[str, int]]:
    """Map normalized header labels to column positions.

    Blank labels are skipped; returns None when no label is usable so that
    rows fall back to positional lookup.
    """
    index: Dict[str, int] = {}
    for position, label in enumerate(headers):
        norm = normalize_header(label)
        if norm and norm not in index:
            index[norm] = position
    return index or None


def rows_from_records(
    records: Sequence[Sequence[Any]],
    headers: Optional[Sequence[Any]] = None,
) -> List[Row]:
    """Wrap raw cell sequences as Rows sharing one header index."""
    header_index = build_header_index(headers) if headers else None
    return [Row.from_cells(cells, header_index) for cells in records]


def load_sheet_csv(path: Union[str, Path], use_headers: bool = True) -> List[Row]:
    """Load a CSV export of one sheet.

    Cells are read as text and blank cells as empty strings; coercion
    happens later in the normalizer.

    Args:
        path: CSV file path.
        use_headers: Address fields by the header row instead of position.

    Returns:
        List of rows, empty if the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Sheet export not found: {path}")
        return []

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    headers = list(df.columns) if use_headers else None
    return rows_from_records(df.values.tolist(), headers)


def parse_gviz_payload(text: str) -> List[Row]:
    """Decode a gviz response body into Rows.

    The body wraps a JSON object in a JavaScript callback, e.g.
    ``google.visualization.Query.setResponse({...});``. Column labels from
    ``table.cols`` become the header index when present.

    Raises:
        ValueError: If the body holds no JSON object.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < start:
        raise ValueError("gviz payload contains no JSON object")

    payload = json.loads(text[start:end + 1])
    table = payload.get("table") or {}

    records = []
    for raw_row in table.get("rows") or []:
        cells = raw_row.get("c") or []
        records.append([cell.get("v") if cell else None for cell in cells])

    labels = [(col or {}).get("label", "") for col in table.get("cols") or []]
    return rows_from_records(records, labels)


def filter_rows_by_key(rows: Sequence[Row], key: str, column: ColumnSpec) -> List[Row]:
    """Keep rows whose key column matches ``key`` exactly (after cleaning)."""
    wanted = clean_str(key)
    return [row for row in rows if clean_str(row.get(column)) == wanted]


class CsvSheetSource:
    """Reads sheets from a directory of CSV exports."""

    def __init__(self, data_dir: Union[str, Path] = DATA_DIR, use_headers: bool = True):
        self.data_dir = Path(data_dir)
        self.use_headers = use_headers

    def sheet_path(self, sheet_name: str) -> Path:
        return self.data_dir / f"{sheet_name}.csv"

    def rows(self, sheet_name: Optional[str]) -> List[Row]:
        """All rows of a sheet; an unnamed sheet has no rows."""
        if not sheet_name:
            return []
        return load_sheet_csv(self.sheet_path(sheet_name), use_headers=self.use_headers)

    def rows_for_key(self, sheet_name: Optional[str], key: str, column: ColumnSpec) -> List[Row]:
        return filter_rows_by_key(self.rows(sheet_name), key, column)
