"""
Spreadsheet ingestion: billing sheet rows -> ``ServiceRecord`` values.

The sheets come from the transport company's export and usually carry a few
title lines above the real header row, so the header is located by scanning
for the ``Member ID`` cell instead of assuming row 0.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections import OrderedDict
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from .errors import SpreadsheetFormatError
from .records import CellPosition, ServiceRecord

logger = logging.getLogger(__name__)

HEADER_LABEL = "Member ID"

# sheet header (lower-cased) -> ServiceRecord attribute
COLUMN_MAP: Dict[str, str] = {
    "member id": "member_id",
    "f&l name": "name",
    "name": "name",
    "city": "city",
    "state": "state",
    "zip code": "zip_code",
    "zip": "zip_code",
    "area code": "area_code",
    "phone": "phone",
    "dob": "dob",
    "date of birth": "dob",
    "pickup date": "pickup_date",
    "origin": "origin",
    "ref id": "ref_id",
    "trip price": "trip_price",
}

REQUIRED = ("member_id", "name", "pickup_date", "origin", "ref_id")


def find_header_cell(frame: pd.DataFrame, label: str = HEADER_LABEL) -> CellPosition:
    """Position (column, row) of the first cell whose text equals ``label``."""
    wanted = label.strip().lower()
    for y, row in enumerate(frame.itertuples(index=False)):
        for x, cell in enumerate(row):
            if isinstance(cell, str) and cell.strip().lower() == wanted:
                return CellPosition(x, y)
    raise SpreadsheetFormatError(f"Header cell '{label}' not found")


def read_raw_sheet(source: Union[str, Path], sheet_name: Union[str, int] = 0) -> pd.DataFrame:
    path = Path(source)
    if not path.is_file():
        raise SpreadsheetFormatError(f"Spreadsheet {path} not found")
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path, header=None, dtype=object, keep_default_na=False)
    return pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=object)


def read_service_records(
    source: Union[str, Path],
    sheet_name: Union[str, int] = 0,
    default_price: Optional[Decimal] = None,
) -> List[ServiceRecord]:
    raw = read_raw_sheet(source, sheet_name)
    return records_from_frame(raw, default_price=default_price)


def records_from_frame(raw: pd.DataFrame, default_price: Optional[Decimal] = None) -> List[ServiceRecord]:
    """
    Convert a headerless raw sheet into service records.

    Columns are picked from the header row found by ``find_header_cell``;
    columns to the left of the header cell are ignored. Fully blank rows are
    skipped. A blank trip price falls back to ``default_price``.
    """
    header_pos = find_header_cell(raw)
    headers = raw.iloc[header_pos.y, header_pos.x:]
    columns: Dict[str, int] = {}
    for offset, label in enumerate(headers):
        attr = COLUMN_MAP.get(_text(label).lower())
        if attr and attr not in columns:
            columns[attr] = header_pos.x + offset

    absent = [name for name in REQUIRED if name not in columns]
    if absent:
        raise SpreadsheetFormatError(f"Missing column(s): {', '.join(absent)}")

    records: List[ServiceRecord] = []
    for y in range(header_pos.y + 1, len(raw)):
        row = raw.iloc[y]
        values = {attr: row.iloc[col] for attr, col in columns.items()}
        if all(not _text(value) for value in values.values()):
            continue
        if not _text(values["member_id"]):
            logger.warning("Skipping row %d without member id", y + 1)
            continue
        records.append(_to_record(values, y + 1, default_price))

    logger.info("Read %d service record(s)", len(records))
    return records


def group_by_member(records: Iterable[ServiceRecord]) -> Dict[str, List[ServiceRecord]]:
    """Group records per member id, keeping first-appearance order."""
    groups: Dict[str, List[ServiceRecord]] = OrderedDict()
    for record in records:
        groups.setdefault(record.member_id, []).append(record)
    return groups


# ----------------------------------------------------------------------
# Cell conversion
# ----------------------------------------------------------------------
def _to_record(values: Dict[str, object], line: int, default_price: Optional[Decimal]) -> ServiceRecord:
    pickup = _date(values["pickup_date"], line)
    if pickup is None:
        raise SpreadsheetFormatError(f"Row {line}: pickup date is missing")

    price = _price(values.get("trip_price"), line)
    if price is None:
        if default_price is None:
            raise SpreadsheetFormatError(f"Row {line}: trip price is missing")
        price = default_price

    return ServiceRecord(
        member_id=_text(values["member_id"]),
        name=_text(values["name"]),
        pickup_date=pickup,
        origin=_text(values["origin"]),
        ref_id=_text(values["ref_id"]),
        trip_price=price,
        city=_text(values.get("city")),
        state=_text(values.get("state")),
        zip_code=_text(values.get("zip_code")),
        area_code=_text(values.get("area_code")),
        phone=_text(values.get("phone")),
        dob=_date(values.get("dob"), line),
    )


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            # zip codes and phone numbers read back as floats from Excel
            return str(int(value))
    return str(value).strip()


def _date(value, line: Optional[int] = None) -> Optional[dt.date]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = _text(value)
    if not text:
        return None
    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        raise SpreadsheetFormatError(f"Row {line}: cannot parse date {text!r}")
    return parsed.date()


def _price(value, line: int) -> Optional[Decimal]:
    text = _text(value).replace("$", "").replace(",", "")
    if not text:
        return None
    try:
        price = Decimal(text)
    except InvalidOperation as exc:
        raise SpreadsheetFormatError(f"Row {line}: trip price {text!r} is not a number") from exc
    if not price.is_finite():
        raise SpreadsheetFormatError(f"Row {line}: trip price {text!r} is not a number")
    return price
