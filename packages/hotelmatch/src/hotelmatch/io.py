"""Ingestion and export boundary: tabular files in, validated records out.

Bulk files may be CSV or Excel; headers are matched case-insensitively
against a small alias table so that ``lat``, ``Latitude`` and ``latitude``
all land in the same field.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import pandas as pd
import structlog

from hotelmatch.errors import ValidationError
from hotelmatch.normalize import normalize_country_code, normalize_name
from hotelmatch.types import MasterHotelRecord, SupplierHotelRecord

log = structlog.get_logger()

HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "supplier_code": ("supplier_code", "suppliercode", "supplier"),
    "supplier_hotel_id": ("supplier_hotel_id", "hotel_id", "hotelid", "id"),
    "hotel_name": ("hotel_name", "hotelname", "name"),
    "address_line1": ("address_line1", "addressline1", "address"),
    "city": ("city",),
    "country_code": ("country_code", "countrycode", "country"),
    "postal_code": ("postal_code", "postalcode", "zip", "zipcode", "zip_code"),
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lon", "lng"),
    "phone_number": ("phone_number", "phone"),
    "chain_code": ("chain_code", "chain"),
}

EXPORT_COLUMNS = [
    "supplier_code",
    "supplier_hotel_id",
    "supplier_hotel_name",
    "supplier_address",
    "supplier_city",
    "supplier_country",
    "master_hotel_id",
    "master_hotel_name",
    "master_address",
    "master_city",
    "master_country",
    "mapping_status",
    "confidence_score",
    "mapping_method",
    "mapped_at",
]


def _canonical_header(header: str) -> str:
    return str(header).strip().lower().replace(" ", "_").replace("-", "_")


def canonicalize_columns(columns: Iterable[str]) -> dict[str, str]:
    """Map raw column names to record field names. Unknown columns are dropped."""
    lookup = {alias: field for field, aliases in HEADER_ALIASES.items() for alias in aliases}
    mapping: dict[str, str] = {}
    for column in columns:
        field = lookup.get(_canonical_header(column))
        if field is not None and field not in mapping.values():
            mapping[column] = field
    return mapping


def read_table(path: str | Path) -> list[dict[str, Any]]:
    """Read a CSV or Excel file into row dicts keyed by record field name.

    Every cell is read as text; blank cells become None.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".xlsx":
        df = pd.read_excel(path, dtype=str)
    elif suffix in (".csv", ".txt"):
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    else:
        raise ValidationError(f"unsupported file type: {path.suffix}", field="file")

    df = df.rename(columns=canonicalize_columns(df.columns))
    df = df[[c for c in df.columns if c in HEADER_ALIASES]]
    df = df.astype(object).where(pd.notna(df), None)

    rows = [
        {k: _clean_text(v) for k, v in row.items()}
        for row in df.to_dict(orient="records")
    ]
    log.info("table_loaded", path=str(path), rows=len(rows), columns=list(df.columns))
    return rows


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text or None


def parse_coordinate(value: Any, field: str) -> float | None:
    """Parse an optional latitude/longitude; range-checked."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} is not a number: {value!r}", field=field) from None
    if math.isnan(number):
        return None
    limit = 90.0 if field == "latitude" else 180.0
    if not -limit <= number <= limit:
        raise ValidationError(f"{field} out of range: {number}", field=field)
    return number


def _require(data: Mapping[str, Any], field: str) -> str:
    value = _clean_text(data.get(field))
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    return value


def _descriptive_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "address_line1": _clean_text(data.get("address_line1")),
        "city": _clean_text(data.get("city")),
        "country_code": normalize_country_code(_clean_text(data.get("country_code"))),
        "postal_code": _clean_text(data.get("postal_code")),
        "latitude": parse_coordinate(data.get("latitude"), "latitude"),
        "longitude": parse_coordinate(data.get("longitude"), "longitude"),
        "phone_number": _clean_text(data.get("phone_number")),
        "chain_code": _clean_text(data.get("chain_code")),
    }


def master_from_mapping(data: Mapping[str, Any]) -> MasterHotelRecord:
    """Validate raw master hotel data and compute its normalized name."""
    hotel_name = _require(data, "hotel_name")
    return MasterHotelRecord(
        hotel_name=hotel_name,
        hotel_name_normalized=normalize_name(hotel_name),
        **_descriptive_fields(data),
    )


def supplier_from_mapping(
    data: Mapping[str, Any], supplier_code: str | None = None
) -> SupplierHotelRecord:
    """Validate raw supplier hotel data.

    ``supplier_code`` overrides any code carried in the data itself.
    """
    if supplier_code is not None:
        data = {**data, "supplier_code": supplier_code}
    code = _require(data, "supplier_code")
    hotel_id = _require(data, "supplier_hotel_id")
    hotel_name = _require(data, "hotel_name")
    return SupplierHotelRecord(
        supplier_code=code,
        supplier_hotel_id=hotel_id,
        hotel_name=hotel_name,
        hotel_name_normalized=normalize_name(hotel_name),
        **_descriptive_fields(data),
    )


def validate_master(record: MasterHotelRecord) -> MasterHotelRecord:
    """Check an already-built master record and fill derived fields."""
    if not record.hotel_name or not record.hotel_name.strip():
        raise ValidationError("hotel_name is required", field="hotel_name")
    record.hotel_name_normalized = normalize_name(record.hotel_name)
    record.country_code = normalize_country_code(record.country_code)
    record.latitude = parse_coordinate(record.latitude, "latitude")
    record.longitude = parse_coordinate(record.longitude, "longitude")
    return record


def validate_supplier(record: SupplierHotelRecord) -> SupplierHotelRecord:
    for field in ("supplier_code", "supplier_hotel_id", "hotel_name"):
        value = getattr(record, field)
        if value is None or not str(value).strip():
            raise ValidationError(f"{field} is required", field=field)
    record.hotel_name_normalized = normalize_name(record.hotel_name)
    record.country_code = normalize_country_code(record.country_code)
    record.latitude = parse_coordinate(record.latitude, "latitude")
    record.longitude = parse_coordinate(record.longitude, "longitude")
    return record


def mappings_dataframe(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=EXPORT_COLUMNS)


def write_export(rows: Iterable[Mapping[str, Any]], path: str | Path) -> int:
    """Write mapping rows as a flat CSV or Excel table. Returns the row count."""
    path = Path(path)
    df = mappings_dataframe(rows)
    if path.suffix.lower() == ".xlsx":
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
    log.info("mappings_exported", path=str(path), rows=len(df))
    return len(df)
