"""
Mapping of service records onto the claim form template fields.

The template exposes anonymous text fields ``Text1`` .. ``Text57``. The tables
below pin each logical slot of the form to its field name; a template change
has to be reflected here.
"""

from __future__ import annotations

import datetime as dt
import re
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import Settings
from .pagination import PageInfo
from .records import ServiceRecord

EMPTY = ""

HEADER_FIELDS: Dict[str, str] = {
    "member_id": "Text1",
    "name": "Text2",
    "origin": "Text3",
    "city": "Text4",
    "state": "Text5",
    "zip_code": "Text6",
    "area_code": "Text7",
    "phone": "Text8",
    "dob_month": "Text9",
    "dob_day": "Text10",
    "dob_year": "Text11",
    "federal_tax_id": "Text54",
    "provider": "Text57",
}

FOOTER_FIELD = "Text56"

ROW_COLUMNS: Tuple[str, ...] = (
    "pickup_month",
    "pickup_day",
    "pickup_year",
    "place_of_service",
    "procedures",
    "charges",
    "ref_id",
)

# One tuple per service line of the form, in ROW_COLUMNS order.
ROW_FIELDS: Tuple[Tuple[str, ...], ...] = (
    ("Text12", "Text13", "Text14", "Text15", "Text16", "Text17", "Text18"),
    ("Text19", "Text20", "Text21", "Text22", "Text23", "Text24", "Text25"),
    ("Text26", "Text27", "Text28", "Text29", "Text30", "Text31", "Text32"),
    ("Text33", "Text34", "Text35", "Text36", "Text37", "Text38", "Text39"),
    ("Text40", "Text41", "Text42", "Text43", "Text44", "Text45", "Text46"),
    ("Text47", "Text48", "Text49", "Text50", "Text51", "Text52", "Text53"),
)

_OPTIONAL_ADDRESS = ("city", "state", "zip_code", "area_code", "phone")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_CENTS = Decimal("0.01")


def template_field_names() -> List[str]:
    """Every field name the page layout may write."""
    names = list(HEADER_FIELDS.values()) + [FOOTER_FIELD]
    for row in ROW_FIELDS:
        names.extend(row)
    return names


# ----------------------------------------------------------------------
# Formatting helpers
# ----------------------------------------------------------------------
def format_money(amount) -> str:
    """Fixed-point amount with exactly two decimals, half-up rounding."""
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def split_date(value: Optional[dt.date]) -> Tuple[str, str, str]:
    """Return ``(MM, DD, YY)`` for a date, or three empty strings for None."""
    if value is None:
        return EMPTY, EMPTY, EMPTY
    return value.strftime("%m"), value.strftime("%d"), value.strftime("%y")


def total_charges(records: Iterable[ServiceRecord]) -> Decimal:
    return sum((record.trip_price for record in records), Decimal("0"))


def sanitize_member_id(member_id: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", member_id)


def page_file_name(member_id: str, page_num: int, output_dir: Path) -> Path:
    """``<output_dir>/<sanitized member id>_<NNN>.pdf``"""
    return Path(output_dir) / f"{sanitize_member_id(member_id)}_{page_num:03d}.pdf"


# ----------------------------------------------------------------------
# Page sections
# ----------------------------------------------------------------------
def header_fields(header: ServiceRecord, page: PageInfo, settings: Settings) -> Dict[str, str]:
    member_id = header.member_id
    if page.is_multi_page():
        member_id += page.page_suffix()

    fields = {
        HEADER_FIELDS["member_id"]: member_id,
        HEADER_FIELDS["name"]: header.name,
        HEADER_FIELDS["origin"]: header.origin_code,
    }
    # empty address parts keep the template default
    for attr in _OPTIONAL_ADDRESS:
        value = getattr(header, attr)
        if value:
            fields[HEADER_FIELDS[attr]] = value

    month, day, year = split_date(header.dob)
    fields[HEADER_FIELDS["dob_month"]] = month
    fields[HEADER_FIELDS["dob_day"]] = day
    fields[HEADER_FIELDS["dob_year"]] = year
    fields[HEADER_FIELDS["federal_tax_id"]] = settings.federal_tax_id
    fields[HEADER_FIELDS["provider"]] = settings.provider
    return fields


def row_fields(rows: Sequence[ServiceRecord], settings: Settings) -> Dict[str, str]:
    if len(rows) > len(ROW_FIELDS):
        raise ValueError(f"A page holds at most {len(ROW_FIELDS)} rows, got {len(rows)}")

    fields: Dict[str, str] = {}
    for slot, record in zip(ROW_FIELDS, rows):
        month, day, year = split_date(record.pickup_date)
        values = (
            month,
            day,
            year,
            settings.place_of_service,
            settings.procedures,
            format_money(record.trip_price),
            record.ref_id,
        )
        fields.update(zip(slot, values))
    return fields


def footer_fields(page: PageInfo, total: Decimal) -> Dict[str, str]:
    if page.is_last_page():
        return {FOOTER_FIELD: format_money(total)}
    return {FOOTER_FIELD: f"See page {page.page_count}"}


def build_page_fields(
    header: ServiceRecord,
    rows: Sequence[ServiceRecord],
    page: PageInfo,
    settings: Settings,
    total: Decimal,
) -> Dict[str, str]:
    """
    Compute every field value of one page.

    Args:
        header: The member's first record; source of the header block.
        rows: Records printed on this page (at most six).
        page: Pagination state of this page.
        settings: Static provider configuration.
        total: Total charge of the member, printed on the last page.

    Returns:
        Mapping of template field name -> text value.
    """
    fields = header_fields(header, page, settings)
    fields.update(row_fields(rows, settings))
    fields.update(footer_fields(page, total))
    return fields
