"""Namespace-qualified store of every callable found in the corpus."""

import logging
from collections import defaultdict

from lua_api_annotator.extraction.exposure import resolve_exposure
from lua_api_annotator.models import (
    FFI_NAMESPACE,
    GLOBAL_NAMESPACE,
    HELPER_NAMESPACE,
    Exposure,
    FfiFunction,
    FfiType,
    FunctionRecord,
    UndocumentedRecord,
)

logger = logging.getLogger(__name__)


class Catalog:
    """Unified store keyed by "namespace.name".

    A record for an existing key is only replaced by one with a strictly
    longer parameter list. The namespace index is updated in lockstep and
    keeps insertion order, which is the order bare-name fallback lookups
    search in. Records are never removed.

    The FFI and helper sub-stores keep the first record seen for a name.
    """

    def __init__(self):
        self._records: dict[str, FunctionRecord] = {}
        self.namespaces: dict[str, set[str]] = {}

        self.reference_functions: dict[str, FunctionRecord] = {}
        self.ffi_functions: dict[str, FfiFunction] = {}
        self.ffi_types: dict[str, FfiType] = {}
        self.helper_functions: dict[str, FunctionRecord] = {}
        self.exposures: dict[str, Exposure] = {}
        self.undocumented: dict[str, UndocumentedRecord] = {}

        self.local_names: set[str] = set()
        self.global_names: set[str] = set()
        self.prefixed_calls: defaultdict[str, set[str]] = defaultdict(set)

        self._resolving: set[str] = set()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records

    def get(self, key: str) -> FunctionRecord | None:
        return self._records.get(key)

    def records(self) -> list[FunctionRecord]:
        return list(self._records.values())

    def insert(self, namespace: str, name: str, record: FunctionRecord) -> bool:
        """Add a record, keeping the existing one unless the new one is more complete.

        Args:
            namespace: Namespace the record belongs to
            name: Bare function name
            record: The candidate record

        Returns:
            True if the record was stored
        """
        key = f"{namespace}.{name}"
        existing = self._records.get(key)
        if existing is not None and len(record.parameters) <= len(
            existing.parameters
        ):
            logger.debug(f"Keeping existing {key} ({len(existing.parameters)} params)")
            return False

        self._records[key] = record
        self.namespaces.setdefault(namespace, set()).add(name)
        return True

    def insert_ffi_function(self, function: FfiFunction) -> bool:
        """Store a C declaration; the first one seen for a name wins."""
        if function.name in self.ffi_functions:
            return False

        self.ffi_functions[function.name] = function
        key = f"{FFI_NAMESPACE}.{function.name}"
        if key not in self._records:
            self._records[key] = FunctionRecord(
                name=function.name,
                namespace=FFI_NAMESPACE,
                parameters=function.parameters,
                return_type=function.return_type,
                source=function.source,
                kind="ffi",
            )
            self.namespaces.setdefault(FFI_NAMESPACE, set()).add(function.name)
        return True

    def insert_ffi_type(self, ffi_type: FfiType) -> bool:
        """Store a C typedef; the first one seen for a name wins."""
        if ffi_type.name in self.ffi_types:
            return False
        self.ffi_types[ffi_type.name] = ffi_type
        return True

    def insert_helper(self, record: FunctionRecord) -> bool:
        """Store a Helper function; the first one seen for a name wins."""
        if record.name in self.helper_functions:
            return False
        self.helper_functions[record.name] = record
        return True

    def add_reference(self, record: FunctionRecord) -> None:
        self.reference_functions[record.name] = record

    def add_exposure(self, exposure: Exposure) -> None:
        self.exposures[exposure.name] = exposure

    def resolve(self, path: str) -> FunctionRecord | FfiFunction | None:
        """Look up "namespace.name", falling back to the specialised stores.

        When the bare name is defined in several namespaces the first
        namespace in insertion order wins.

        Args:
            path: Dotted function path, e.g. "widgetSystem.activateEditBox"

        Returns:
            The matching record, or None
        """
        if path in self._records:
            return self._records[path]

        parts = path.split(".")
        if len(parts) != 2:
            return None
        namespace, name = parts

        if namespace == HELPER_NAMESPACE and name in self.helper_functions:
            return self.helper_functions[name]
        elif namespace == FFI_NAMESPACE and name in self.ffi_functions:
            return self.ffi_functions[name]
        elif namespace == GLOBAL_NAMESPACE and name in self.reference_functions:
            return self.reference_functions[name]
        elif name in self.exposures and name not in self._resolving:
            return self._resolve_exposed(name)

        for ns, names in self.namespaces.items():
            if name in names:
                return self._records[f"{ns}.{name}"]

        return None

    def _resolve_exposed(self, name: str) -> FunctionRecord:
        exposure = self.exposures[name]
        self._resolving.add(name)
        try:
            resolved = resolve_exposure(exposure, self)
        finally:
            self._resolving.discard(name)

        return FunctionRecord(
            name=name,
            namespace=GLOBAL_NAMESPACE,
            parameters=resolved.parameters,
            return_type=resolved.return_type,
            source=exposure.source,
            description=exposure.description,
            kind="exposed",
        )

    def known_names(self) -> set[str]:
        """Every name documented or defined through a formal channel."""
        known = set(self.reference_functions)
        known.update(self.global_names)
        for name in self.ffi_functions:
            known.add(name)
            known.add(f"{FFI_NAMESPACE}.{name}")
        known.update(f"{HELPER_NAMESPACE}.{name}" for name in self.helper_functions)
        known.update(self.exposures)
        return known
