"""
Domain records shared by ingestion and PDF generation.

``ServiceRecord`` is one billable trip for a member, as read from the billing
spreadsheet. ``CellPosition`` addresses a cell inside a raw sheet.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class ServiceRecord:
    """One row of billing/service data for a member."""

    member_id: str
    name: str
    pickup_date: dt.date
    origin: str
    ref_id: str
    trip_price: Decimal
    city: str = ""
    state: str = ""
    zip_code: str = ""
    area_code: str = ""
    phone: str = ""
    dob: Optional[dt.date] = None  # not every sheet carries a birth date

    @property
    def origin_code(self) -> str:
        """Part of the origin before the first ``/``, or the whole origin."""
        code, _, _ = self.origin.partition("/")
        return code


@dataclass(frozen=True)
class CellPosition:
    x: int
    y: int
