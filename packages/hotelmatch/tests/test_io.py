"""Tests for tabular import, record validation and export."""

import pandas as pd
import pytest

from hotelmatch.errors import ValidationError
from hotelmatch.io import (
    EXPORT_COLUMNS,
    canonicalize_columns,
    master_from_mapping,
    parse_coordinate,
    read_table,
    supplier_from_mapping,
    validate_master,
    validate_supplier,
    write_export,
)
from hotelmatch.types import MasterHotelRecord, SupplierHotelRecord


def test_canonicalize_columns_aliases():
    mapping = canonicalize_columns(["Hotel Name", "ID", "Lat", "Lng", "Country", "Zip", "Rating"])
    assert mapping == {
        "Hotel Name": "hotel_name",
        "ID": "supplier_hotel_id",
        "Lat": "latitude",
        "Lng": "longitude",
        "Country": "country_code",
        "Zip": "postal_code",
    }


def test_canonicalize_first_alias_wins():
    mapping = canonicalize_columns(["name", "hotel_name"])
    assert mapping == {"name": "hotel_name"}


def test_read_csv(tmp_path):
    path = tmp_path / "suppliers.csv"
    path.write_text(
        "Hotel_ID,HotelName,Address,City,Country,ZipCode,Lat,Lon,Phone,Chain,Rating\n"
        "007,Grand Plaza,1 Strand,London,gb,WC2N 5HX,51.5074,-0.1278,+44 20 7946 0000,GP,5\n"
        "008,Savoy,,London,GB,,,,,,4\n"
    )
    rows = read_table(path)
    assert len(rows) == 2
    assert rows[0]["supplier_hotel_id"] == "007"
    assert rows[0]["hotel_name"] == "Grand Plaza"
    assert rows[0]["latitude"] == "51.5074"
    assert "Rating" not in rows[0]
    assert rows[1]["address_line1"] is None
    assert rows[1]["latitude"] is None


def test_read_xlsx(tmp_path):
    path = tmp_path / "masters.xlsx"
    pd.DataFrame([
        {"hotel_name": "Grand Plaza", "city": "London", "country_code": "GB", "latitude": 51.5075},
        {"hotel_name": "Savoy", "city": "London", "country_code": "GB", "latitude": None},
    ]).to_excel(path, index=False)

    rows = read_table(path)
    assert [r["hotel_name"] for r in rows] == ["Grand Plaza", "Savoy"]
    assert float(rows[0]["latitude"]) == pytest.approx(51.5075)
    assert rows[1]["latitude"] is None


def test_read_unsupported(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{}")
    with pytest.raises(ValidationError):
        read_table(path)


def test_parse_coordinate():
    assert parse_coordinate("51.5", "latitude") == 51.5
    assert parse_coordinate(None, "latitude") is None
    assert parse_coordinate("  ", "longitude") is None
    assert parse_coordinate(0, "latitude") == 0.0
    with pytest.raises(ValidationError):
        parse_coordinate("north", "latitude")
    with pytest.raises(ValidationError):
        parse_coordinate("91", "latitude")
    with pytest.raises(ValidationError):
        parse_coordinate(-181, "longitude")


def test_supplier_from_mapping():
    record = supplier_from_mapping(
        {"supplier_hotel_id": "007", "hotel_name": " The Grand Plaza ", "country_code": "gb", "latitude": "51.5"},
        supplier_code="ACME",
    )
    assert record.supplier_code == "ACME"
    assert record.hotel_name == "The Grand Plaza"
    assert record.hotel_name_normalized == "grand plaza"
    assert record.country_code == "GB"
    assert record.latitude == 51.5


@pytest.mark.parametrize("missing", ["supplier_code", "supplier_hotel_id", "hotel_name"])
def test_supplier_required_fields(missing):
    data = {"supplier_code": "ACME", "supplier_hotel_id": "007", "hotel_name": "Grand Plaza"}
    data[missing] = "   "
    with pytest.raises(ValidationError) as exc:
        supplier_from_mapping(data)
    assert exc.value.field == missing


def test_master_from_mapping():
    master = master_from_mapping({"hotel_name": "Savoy Hotel", "postal_code": "WC2R 0EZ"})
    assert master.hotel_name_normalized == "savoy"
    assert master.postal_code == "WC2R 0EZ"
    with pytest.raises(ValidationError):
        master_from_mapping({"hotel_name": None})


def test_typed_records_coordinates_range_checked():
    supplier = SupplierHotelRecord(
        supplier_code="ACME", supplier_hotel_id="007", hotel_name="Grand Plaza", latitude=500.0, longitude=0.0
    )
    with pytest.raises(ValidationError) as exc:
        validate_supplier(supplier)
    assert exc.value.field == "latitude"

    with pytest.raises(ValidationError) as exc:
        validate_master(MasterHotelRecord(hotel_name="Grand Plaza", latitude=51.5, longitude=-200.0))
    assert exc.value.field == "longitude"

    master = validate_master(MasterHotelRecord(hotel_name="Grand Plaza", latitude=0.0, longitude=0.0))
    assert (master.latitude, master.longitude) == (0.0, 0.0)


def test_write_export_csv(tmp_path):
    path = tmp_path / "out.csv"
    count = write_export([{"supplier_code": "ACME", "supplier_hotel_id": "007", "mapping_status": "unmapped"}], path)
    assert count == 1
    df = pd.read_csv(path)
    assert list(df.columns) == EXPORT_COLUMNS
    assert df.loc[0, "supplier_code"] == "ACME"


def test_write_export_xlsx(tmp_path):
    path = tmp_path / "out.xlsx"
    assert write_export([], path) == 0
    assert list(pd.read_excel(path).columns) == EXPORT_COLUMNS
