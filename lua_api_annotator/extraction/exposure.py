"""Parse AddGlobalAccess re-exports and resolve them against the catalog.

Two forms are recognised:

    AddGlobalAccess("ActivateEditBox", widgetSystem.activateEditBox)
    AddGlobalAccess("DrawRect", function (...) return widgetSystem.queueShapeDraw("rectangle", ...) end)

The first is a direct alias. The second is a wrapper whose forwarded
argument list decides how the exposed signature relates to the target's.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import replace
from typing import TYPE_CHECKING

from lua_api_annotator.extraction.tokenizer import parse_argument_string
from lua_api_annotator.models import (
    DirectExposure,
    Exposure,
    Parameter,
    ResolvedExposure,
    WrapperExposure,
)

if TYPE_CHECKING:
    from lua_api_annotator.catalog import Catalog

logger = logging.getLogger(__name__)

DIRECT_MAPPING_PATTERN = re.compile(
    r"""AddGlobalAccess\s*\(\s*["'](\w+)["']\s*,\s*([\w\.]+)\s*\)"""
)

WRAPPER_FUNCTION_PATTERN = re.compile(
    r"""AddGlobalAccess\s*\(\s*["'](\w+)["']\s*,\s*function\s*\((.*?)\)(.*?)"""
    r"""return\s+([\w\.]+)\s*\((.*?)\)(.*?)\bend\s*\)""",
    re.DOTALL,
)

VARARGS = "..."


def classify_forwarding(target_params: str) -> tuple[list[str], bool]:
    """Split a forwarded argument list into fixed leading arguments and a varargs flag.

    Args:
        target_params: The argument list the wrapper passes to its target

    Returns:
        (fixed_params, forwards_rest). Without a '...' every argument is
        fixed and forwards_rest is False.
    """
    fixed_params = []
    for arg in parse_argument_string(target_params):
        if VARARGS in arg:
            return fixed_params, True
        fixed_params.append(arg)
    return fixed_params, False


def extract_exposures(stripped: str, file_name: str) -> Iterator[Exposure]:
    """Yield every AddGlobalAccess mapping in a file.

    Args:
        stripped: Source with comments removed and string literals intact
        file_name: Name recorded as the exposures' source
    """
    for match in DIRECT_MAPPING_PATTERN.finditer(stripped):
        yield DirectExposure(
            name=match.group(1), original=match.group(2), source=file_name
        )

    for match in WRAPPER_FUNCTION_PATTERN.finditer(stripped):
        target_params = match.group(5).strip()
        fixed_params, forwards_rest = classify_forwarding(target_params)
        yield WrapperExposure(
            name=match.group(1),
            original=match.group(4),
            source=file_name,
            wrapper_params=match.group(2).strip() or VARARGS,
            target_params=target_params,
            fixed_params=fixed_params,
            forwards_rest=forwards_rest,
        )


def record_exposures(stripped: str, file_name: str, catalog: "Catalog") -> int:
    """Add every AddGlobalAccess mapping of a file to the catalog."""
    count = 0
    for exposure in extract_exposures(stripped, file_name):
        catalog.add_exposure(exposure)
        count += 1

    if count:
        logger.info(f"{file_name}: {count} globally exposed functions")
    return count


def resolve_exposure(exposure: Exposure, catalog: "Catalog") -> ResolvedExposure:
    """Work out the signature an exposed name is callable with.

    Direct aliases take the target's parameters and return type as they
    are. Wrappers that forward '...' drop one leading target parameter per
    fixed argument; wrappers without '...' are opaque and keep their own
    parameter names typed as any. Unresolved targets become a single
    '...' parameter.

    Args:
        exposure: The mapping to resolve
        catalog: Catalog used to look up the target path

    Returns:
        ResolvedExposure with the effective parameter list
    """
    target = catalog.resolve(exposure.original)
    if target is None:
        logger.debug(f"Could not resolve {exposure.original} for {exposure.name}")
        return ResolvedExposure(
            exposure=exposure,
            parameters=[
                Parameter(
                    name=VARARGS,
                    description=f"Parameters derived from {exposure.original}",
                )
            ],
            return_type="any",
            resolved=False,
        )

    if isinstance(exposure, DirectExposure):
        parameters = [replace(p) for p in target.parameters]
    elif exposure.forwards_rest:
        skipped = len(exposure.fixed_params)
        parameters = [replace(p) for p in target.parameters[skipped:]]
    else:
        parameters = [Parameter(name=name) for name in exposure.declared_params()]

    return ResolvedExposure(
        exposure=exposure,
        parameters=parameters,
        return_type=target.return_type,
        resolved=True,
    )
