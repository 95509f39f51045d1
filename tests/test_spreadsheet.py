import datetime as dt
from decimal import Decimal

import pandas as pd
import pytest

from medpdfmaker import CellPosition, SpreadsheetFormatError
from medpdfmaker.spreadsheet import (
    find_header_cell,
    group_by_member,
    read_service_records,
    records_from_frame,
)

HEADER = [
    "Member ID", "F&L Name", "City", "State", "Zip Code", "Area Code",
    "Phone", "DOB", "Pickup Date", "Origin", "Ref ID", "Trip Price",
]

CSV_TEXT = """Trip export,,,,,,,,,,,,
,,,,,,,,,,,,
,Member ID,F&L Name,City,State,Zip Code,Area Code,Phone,DOB,Pickup Date,Origin,Ref ID,Trip Price
,AB/12,Jane Doe,Brooklyn,NY,11201,718,555-0100,07/09/1950,03/01/2024,ABC/Main hospital,R-1,57.10
,C7,John Roe,,,,,,,03/02/2024,XYZ,R-2,
,,,,,,,,,,,,
,AB/12,Jane Doe,Brooklyn,NY,11201,718,555-0100,07/09/1950,03/03/2024,ABC/Main hospital,R-3,"$1,057.10"
"""


def test_find_header_cell():
    frame = pd.DataFrame([["title", None], [None, None], [None, " member id "]], dtype=object)
    assert find_header_cell(frame, "Member ID") == CellPosition(1, 2)


def test_find_header_cell_missing():
    with pytest.raises(SpreadsheetFormatError):
        find_header_cell(pd.DataFrame([["a", "b"]], dtype=object))


def test_read_csv(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(CSV_TEXT)

    records = read_service_records(path, default_price=Decimal("50.00"))

    assert [r.ref_id for r in records] == ["R-1", "R-2", "R-3"]
    first, second, third = records
    assert first.member_id == "AB/12"
    assert first.name == "Jane Doe"
    assert first.zip_code == "11201"
    assert first.dob == dt.date(1950, 7, 9)
    assert first.pickup_date == dt.date(2024, 3, 1)
    assert first.trip_price == Decimal("57.10")
    assert second.city == ""
    assert second.dob is None
    assert second.trip_price == Decimal("50.00")
    assert third.trip_price == Decimal("1057.10")


def test_missing_price_without_default(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(CSV_TEXT)
    with pytest.raises(SpreadsheetFormatError, match="trip price"):
        read_service_records(path)


@pytest.mark.parametrize("price", ["inf", "-Infinity", "nan", "sNaN"])
def test_non_finite_price_rejected(tmp_path, price):
    path = tmp_path / "trips.csv"
    path.write_text(
        "Member ID,F&L Name,Pickup Date,Origin,Ref ID,Trip Price\n"
        f"Z1,Ann Lee,01/02/2024,Q,R-1,{price}\n"
    )
    with pytest.raises(SpreadsheetFormatError, match="trip price"):
        read_service_records(path, default_price=Decimal("50.00"))


def test_read_xlsx(tmp_path):
    rows = [
        ["Monthly trips"] + [None] * (len(HEADER) - 1),
        HEADER,
        ["Q1", "Ann Lee", "Queens", "NY", 11101, 347, "555-0199",
         dt.datetime(1961, 2, 3), dt.datetime(2024, 4, 5), "DEF/Clinic", "R-9", 61.5],
    ]
    path = tmp_path / "trips.xlsx"
    pd.DataFrame(rows).to_excel(path, header=False, index=False)

    (record,) = read_service_records(path)

    assert record.member_id == "Q1"
    assert record.zip_code == "11101"
    assert record.area_code == "347"
    assert record.dob == dt.date(1961, 2, 3)
    assert record.pickup_date == dt.date(2024, 4, 5)
    assert record.origin_code == "DEF"
    assert record.trip_price == Decimal("61.5")


def test_missing_required_column():
    frame = pd.DataFrame([["Member ID", "F&L Name"], ["A", "B"]], dtype=object)
    with pytest.raises(SpreadsheetFormatError, match="pickup_date"):
        records_from_frame(frame)


def test_bad_date():
    frame = pd.DataFrame(
        [
            ["Member ID", "F&L Name", "Pickup Date", "Origin", "Ref ID", "Trip Price"],
            ["A", "B", "someday", "X", "R", "1"],
        ],
        dtype=object,
    )
    with pytest.raises(SpreadsheetFormatError, match="someday"):
        records_from_frame(frame)


def test_missing_file(tmp_path):
    with pytest.raises(SpreadsheetFormatError):
        read_service_records(tmp_path / "absent.xlsx")


def test_group_by_member_keeps_order(make_record):
    records = [
        make_record(member_id="B", ref_id="1"),
        make_record(member_id="A", ref_id="2"),
        make_record(member_id="B", ref_id="3"),
    ]
    groups = group_by_member(records)

    assert list(groups) == ["B", "A"]
    assert [r.ref_id for r in groups["B"]] == ["1", "3"]
