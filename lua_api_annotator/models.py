"""Data models for the signature catalog."""

import json
import re
from dataclasses import asdict, dataclass, field
from enum import Enum

# Reserved pseudo-namespaces
GLOBAL_NAMESPACE = "global"
LOCAL_NAMESPACE = "local"
FFI_NAMESPACE = "C"
HELPER_NAMESPACE = "Helper"

# Struct/union field: type (with qualifiers and pointers), name, optional array size
FIELD_PATTERN = re.compile(
    r"([a-zA-Z0-9_\s\*]+(?:const|volatile|restrict|unsigned|signed)?"
    r"(?:\s*\*\s*(?:const|volatile|restrict)?)*)\s+([a-zA-Z0-9_]+)"
    r"(?:\s*\[\s*(\d+)\s*\])?"
)


@dataclass
class Parameter:
    """A single parameter of a callable."""

    name: str
    type: str = "any"
    optional: bool = False
    description: str = ""


@dataclass
class FunctionRecord:
    """Everything known about one callable in the catalog."""

    name: str
    namespace: str
    parameters: list[Parameter] = field(default_factory=list)
    return_type: str = "any"
    source: str = ""
    description: str = ""
    detailed: str = ""
    notes: str = ""
    deprecated: bool = False
    # "global", "namespaced", "table", "local", "helper", "reference", "ffi", "exposed"
    kind: str = ""
    body: str = field(default="", repr=False)

    @property
    def key(self) -> str:
        return f"{self.namespace}.{self.name}"

    def to_dict(self) -> dict:
        """Convert to a dictionary, dropping the in-memory body text."""
        data = asdict(self)
        data.pop("body")
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "FunctionRecord":
        params = [Parameter(**p) for p in data.get("parameters", [])]
        values = {k: v for k, v in data.items() if k not in ("parameters", "body")}
        return cls(parameters=params, **values)


@dataclass
class FfiFunction:
    """A C function declared inside an ffi.cdef block."""

    name: str
    return_type: str
    parameters: list[Parameter]
    declaration: str
    source: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "FfiFunction":
        params = [Parameter(**p) for p in data.get("parameters", [])]
        values = {k: v for k, v in data.items() if k != "parameters"}
        return cls(parameters=params, **values)


@dataclass
class FfiType:
    """A C type declared with typedef inside an ffi.cdef block."""

    name: str
    kind: str  # "struct", "enum", "union" or the aliased type
    declaration: str
    source: str

    def fields(self) -> list[tuple[str, str, bool]]:
        """Split a struct/union body into (name, type, is_array) triples."""
        if self.kind not in ("struct", "union"):
            return []
        body_match = re.search(r"\{([\s\S]*)\}", self.declaration)
        if not body_match:
            return []

        fields = []
        for raw_field in body_match.group(1).strip().split(";"):
            if not raw_field.strip():
                continue
            field_match = FIELD_PATTERN.search(raw_field.strip())
            if field_match:
                field_type = re.sub(r"\s+", " ", field_match.group(1).strip())
                fields.append(
                    (field_match.group(2), field_type, field_match.group(3) is not None)
                )
        return fields

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "FfiType":
        return cls(**data)


@dataclass
class Usage:
    """One observed call site of an undocumented function."""

    file: str
    arguments: list[str]


@dataclass
class UndocumentedRecord:
    """A function reconstructed only from the calls made to it."""

    name: str
    parameters: list[Parameter] = field(default_factory=list)
    return_type: str = "any"
    description: str = ""
    usages: list[Usage] = field(default_factory=list)
    files: set[str] = field(default_factory=set)
    detailed: str = ""
    notes: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["files"] = sorted(self.files)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "UndocumentedRecord":
        values = dict(data)
        values["parameters"] = [Parameter(**p) for p in data.get("parameters", [])]
        values["usages"] = [Usage(**u) for u in data.get("usages", [])]
        values["files"] = set(data.get("files", []))
        return cls(**values)


class ExposureTransform(Enum):
    """How a wrapper exposure forwards its arguments."""

    PREPENDS_FIXED = "prepends"
    FORWARDS_ALL = "forwards"
    FIXED_ONLY = "fixed"


@dataclass
class DirectExposure:
    """AddGlobalAccess("Name", ns.fn): a plain alias."""

    name: str
    original: str
    source: str

    @property
    def description(self) -> str:
        return f"Global access to {self.original}"

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = "direct"
        return data


@dataclass
class WrapperExposure:
    """AddGlobalAccess("Name", function(...) return ns.fn(...) end)."""

    name: str
    original: str
    source: str
    wrapper_params: str
    target_params: str
    fixed_params: list[str]
    forwards_rest: bool

    @property
    def transform(self) -> ExposureTransform:
        if not self.forwards_rest:
            return ExposureTransform.FIXED_ONLY
        if self.fixed_params:
            return ExposureTransform.PREPENDS_FIXED
        return ExposureTransform.FORWARDS_ALL

    @property
    def transformation(self) -> str:
        """Human-readable summary of the parameter transformation."""
        if self.transform is ExposureTransform.PREPENDS_FIXED:
            return f"Prepends fixed parameters: {', '.join(self.fixed_params)}"
        if self.transform is ExposureTransform.FORWARDS_ALL:
            return "Passes all parameters directly"
        return f"Uses fixed parameters: {self.target_params}"

    @property
    def description(self) -> str:
        return f"Wrapper for {self.original} with parameter transformation"

    def declared_params(self) -> list[str]:
        """The wrapper's own parameter names, empty when it only takes '...'."""
        if not self.wrapper_params or self.wrapper_params == "...":
            return []
        return [p.strip() for p in self.wrapper_params.split(",") if p.strip()]

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = "wrapper"
        return data


Exposure = DirectExposure | WrapperExposure


def exposure_from_dict(data: dict) -> Exposure:
    """Rebuild an exposure from its serialized form, dispatching on 'type'."""
    values = {k: v for k, v in data.items() if k != "type"}
    if data["type"] == "direct":
        return DirectExposure(**values)
    if data["type"] == "wrapper":
        return WrapperExposure(**values)
    raise ValueError(f"Unknown exposure type: {data['type']}")


@dataclass
class ResolvedExposure:
    """An exposure with its effective signature worked out."""

    exposure: Exposure
    parameters: list[Parameter]
    return_type: str
    resolved: bool

    @property
    def name(self) -> str:
        return self.exposure.name

    @property
    def namespace(self) -> str:
        """Namespace of the target path, e.g. 'widgetSystem'."""
        parts = self.exposure.original.split(".")
        return parts[0] if len(parts) == 2 else ""

    def to_dict(self) -> dict:
        return {
            **self.exposure.to_dict(),
            "parameters": [asdict(p) for p in self.parameters],
            "return_type": self.return_type,
            "resolved": self.resolved,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResolvedExposure":
        values = {
            k: v
            for k, v in data.items()
            if k not in ("parameters", "return_type", "resolved")
        }
        return cls(
            exposure=exposure_from_dict(values),
            parameters=[Parameter(**p) for p in data.get("parameters", [])],
            return_type=data.get("return_type", "any"),
            resolved=data.get("resolved", False),
        )


@dataclass
class CatalogError:
    """A non-fatal problem hit while building the catalog."""

    file: str | None
    error: str
    phase: str  # "reading", "fragment", "reference"


@dataclass
class CatalogResult:
    """The record collections handed to the annotation generator.

    definitions holds every corpus-defined record keyed by "namespace.name";
    the other collections map to one output file each.
    """

    lua_functions: dict[str, FunctionRecord] = field(default_factory=dict)
    ffi_functions: dict[str, FfiFunction] = field(default_factory=dict)
    ffi_types: dict[str, FfiType] = field(default_factory=dict)
    helper_functions: dict[str, FunctionRecord] = field(default_factory=dict)
    undocumented_functions: dict[str, UndocumentedRecord] = field(
        default_factory=dict
    )
    exposures: dict[str, ResolvedExposure] = field(default_factory=dict)
    definitions: dict[str, FunctionRecord] = field(default_factory=dict)
    errors: list[CatalogError] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization, sorted by name."""
        return {
            "lua": _sorted_dict(self.lua_functions),
            "ffi": {
                "functions": _sorted_dict(self.ffi_functions),
                "types": _sorted_dict(self.ffi_types),
            },
            "helper": _sorted_dict(self.helper_functions),
            "undocumented": _sorted_dict(self.undocumented_functions),
            "exposed": _sorted_dict(self.exposures),
            "definitions": _sorted_dict(self.definitions),
            "errors": [asdict(e) for e in self.errors],
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)


def _sorted_dict(records: dict) -> dict:
    return {name: records[name].to_dict() for name in sorted(records)}
