"""YAML loading and saving utilities for fleet snapshots."""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

import yaml

from .agreement import Agreement
from .snapshot import FleetSnapshot, normalize_plate
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


class FleetDataError(ValueError):
    """Fleet or log file does not have the expected structure."""


def _parse_agreement(dct: Dict[str, Any]) -> Agreement:
    """Build an Agreement from a row under 'agreements'."""
    return Agreement(
        dct.get("id"),
        dct.get("plate_number"),
        dct.get("car_type"),
        dct.get("date_end"),
        dct.get("status"),
        dct.get("customer_name"),
        dct.get("mobile"),
    )


def _parse_vehicle(dct: Dict[str, Any]) -> Vehicle:
    """Build a Vehicle from a row under 'vehicles'; make/model may be nested."""
    catalog = dct.get("car_catalog") or dct.get("catalog") or {}
    if not isinstance(catalog, dict):
        catalog = {}
    return Vehicle(
        dct.get("id"),
        dct.get("plate_number"),
        dct.get("status"),
        dct.get("current_mileage"),
        dct.get("next_service_mileage"),
        dct.get("insurance_expiry"),
        dct.get("roadtax_expiry"),
        dct.get("make") or catalog.get("make"),
        dct.get("model") or catalog.get("model"),
        dct.get("next_gear_oil_mileage"),
        dct.get("next_tyre_mileage"),
        dct.get("next_brake_pad_mileage"),
        dct.get("track_insurance"),
    )


def _rows(data: Dict[str, Any], key: str, parse: Callable[[Dict[str, Any]], Any]) -> List[Any]:
    rows = data.get(key) or []
    if not isinstance(rows, list):
        raise FleetDataError(f"'{key}' must be a list")
    parsed = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise FleetDataError(f"{key}[{index}] is not a mapping")
        parsed.append(parse(row))
    return parsed


def load_fleet(filename: Union[str, Path]) -> FleetSnapshot:
    """
    Load agreements and vehicles from a YAML file.

    Rows are typed by the list they sit in. Missing fields become None and
    are skipped later by the projector; only a broken file structure raises.
    """
    with open(filename, "rb") as fp:
        raw = yaml.load(fp, Loader=yaml.SafeLoader)
    if not isinstance(raw, dict):
        raise FleetDataError(f"{filename}: expected a mapping with 'agreements' and 'vehicles'")

    # Unquoted YAML dates/timestamps become strings here
    data = json.loads(json.dumps(raw, default=str))

    snapshot = FleetSnapshot(
        _rows(data, "agreements", _parse_agreement),
        _rows(data, "vehicles", _parse_vehicle),
    )
    logger.debug(
        "Loaded %d agreements and %d vehicles from %s",
        len(snapshot.agreements),
        len(snapshot.vehicles),
        filename,
    )
    return snapshot


def save_vehicle_mileage(filename: Union[str, Path], plate_number: str, mileage: float) -> None:
    """
    Update current_mileage for one vehicle in a fleet YAML file.

    Loads the raw YAML, updates the matching vehicle row,
    and writes back to the file.
    """
    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader)

    wanted = normalize_plate(plate_number)
    for row in (data or {}).get("vehicles") or []:
        if isinstance(row, dict) and normalize_plate(row.get("plate_number")) == wanted:
            row["current_mileage"] = mileage
            break
    else:
        raise LookupError(f"No vehicle with plate {plate_number}")

    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )
    logger.info("Updated mileage for %s to %s", plate_number, mileage)
