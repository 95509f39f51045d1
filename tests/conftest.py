import datetime as dt
from decimal import Decimal

import pytest

from medpdfmaker import ServiceRecord, Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        federal_tax_id="12-3456789",
        provider="Acme Medical Transport",
        place_of_service="41",
        procedures="A0130",
        charges="50",
        output_dir=tmp_path / "output",
        input_dir=tmp_path / "input",
    )


@pytest.fixture
def make_record():
    def _make(**overrides):
        values = dict(
            member_id="M100",
            name="Jane Doe",
            pickup_date=dt.date(2024, 3, 5),
            origin="ABC/Main hospital",
            ref_id="R-1",
            trip_price=Decimal("57.10"),
            city="Brooklyn",
            state="NY",
            zip_code="11201",
            area_code="718",
            phone="555-0100",
            dob=dt.date(1950, 7, 9),
        )
        values.update(overrides)
        return ServiceRecord(**values)

    return _make


@pytest.fixture
def make_records(make_record):
    def _make(count, **overrides):
        return [
            make_record(ref_id=f"R-{i + 1}", pickup_date=dt.date(2024, 3, 1) + dt.timedelta(days=i), **overrides)
            for i in range(count)
        ]

    return _make
