"""Save and restore per-kind JSON fragments of the catalog."""

import json
import logging
from pathlib import Path

from lua_api_annotator.catalog import Catalog
from lua_api_annotator.config import FRAGMENT_KINDS
from lua_api_annotator.models import (
    CatalogResult,
    FfiFunction,
    FfiType,
    FunctionRecord,
    ResolvedExposure,
    UndocumentedRecord,
)

logger = logging.getLogger(__name__)


def export_fragment(kind: str, result: CatalogResult, path: Path) -> None:
    """Write one record kind of a result as sorted, indented JSON.

    Args:
        kind: One of "lua", "ffi", "helper", "undocumented", "exposed"
        result: Finished catalog result
        path: Fragment file to (over)write

    Raises:
        ValueError: If kind is not a fragment kind
    """
    if kind not in FRAGMENT_KINDS:
        raise ValueError(f"Unknown fragment kind: {kind}")
    data = result.to_dict()

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data[kind], indent=2, sort_keys=True), encoding="utf-8")
    logger.info(f"Exported {kind} data to {path}")


def _decode(kind: str, data: dict) -> dict:
    if kind in ("lua", "helper"):
        return {name: FunctionRecord.from_dict(d) for name, d in data.items()}
    if kind == "ffi":
        return {
            "functions": {
                name: FfiFunction.from_dict(d)
                for name, d in data.get("functions", {}).items()
            },
            "types": {
                name: FfiType.from_dict(d) for name, d in data.get("types", {}).items()
            },
        }
    if kind == "undocumented":
        return {name: UndocumentedRecord.from_dict(d) for name, d in data.items()}
    if kind == "exposed":
        return {name: ResolvedExposure.from_dict(d) for name, d in data.items()}
    raise ValueError(f"Unknown fragment kind: {kind}")


def load_fragment(kind: str, path: Path) -> dict | None:
    """Read a fragment written by export_fragment.

    Args:
        kind: Record kind the file holds
        path: Fragment file

    Returns:
        Decoded records keyed by name ({"functions", "types"} for ffi), or
        None when the file is missing or cannot be decoded
    """
    if not path.exists():
        logger.warning(f"Fragment {path} doesn't exist, skipping import")
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        records = _decode(kind, data)
    except (
        OSError, json.JSONDecodeError, AttributeError, TypeError, KeyError, ValueError
    ) as e:
        logger.error(f"Error importing {kind} data from {path}: {e}")
        return None

    logger.info(f"Imported {kind} data from {path}")
    return records


def fragment_size(kind: str, records: dict | None) -> int:
    """Number of records in a decoded fragment (0 for None)."""
    if not records:
        return 0
    if kind == "ffi":
        return len(records["functions"]) + len(records["types"])
    return len(records)


def seed_catalog(catalog: Catalog, kind: str, records: dict) -> None:
    """Restore decoded fragment records into the matching catalog store."""
    if kind == "lua":
        for record in records.values():
            catalog.add_reference(record)
    elif kind == "ffi":
        for function in records["functions"].values():
            catalog.insert_ffi_function(function)
        for ffi_type in records["types"].values():
            catalog.insert_ffi_type(ffi_type)
    elif kind == "helper":
        for record in records.values():
            catalog.insert_helper(record)
    elif kind == "undocumented":
        catalog.undocumented.update(records)
    elif kind == "exposed":
        for resolved in records.values():
            catalog.add_exposure(resolved.exposure)
    else:
        raise ValueError(f"Unknown fragment kind: {kind}")

    logger.info(f"Seeded {fragment_size(kind, records)} {kind} records from fragment")


def load_namespace_file(path: Path) -> dict | None:
    """Read a hand-maintained namespace description (ffi or C), if present."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading namespace file {path}: {e}")
        return None
    if not isinstance(data, dict):
        logger.error(f"Namespace file {path} is not a JSON object")
        return None
    return data
