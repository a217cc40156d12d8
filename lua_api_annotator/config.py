"""Load and default the annotator configuration file."""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path

from lua_api_annotator.page_loader import DEFAULT_TIMEOUT_MS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "configuration.json"

DEFAULT_WIKI_URL = (
    "https://wiki.egosoft.com:1337/X%20Rebirth%20Wiki/Modding%20support/"
    "UI%20Modding%20support/Lua%20function%20overview/"
)

# Kinds with one annotation file each
OUTPUT_KINDS = ("lua", "ffi", "ffi_types", "helper", "undocumented")

# Kinds with one JSON fragment each; the namespace files are hand-maintained
FRAGMENT_KINDS = ("lua", "ffi", "helper", "undocumented", "exposed")


def _default_output_files() -> dict[str, str]:
    return {
        "lua": "X4LuaAPI.lua",
        "ffi": "X4FFIAPI.lua",
        "ffi_types": "X4FFITypes.lua",
        "helper": "X4HelperAPI.lua",
        "undocumented": "X4UndocumentedAPI.lua",
    }


def _default_fragment_files() -> dict[str, str]:
    return {
        "lua": "x4-lua-functions.json",
        "ffi": "x4-ffi-definitions.json",
        "helper": "x4-helper-functions.json",
        "undocumented": "x4-undocumented-functions.json",
        "exposed": "x4-global-access.json",
        "ffi_namespace": "x4-ffi-namespace.json",
        "c_namespace": "x4-c-namespace.json",
    }


@dataclass
class AnnotatorConfig:
    """Paths and settings for one generation run.

    Path values are kept as written in the file; the *_dir and *_path
    accessors resolve them against base_dir.
    """

    wiki_url: str = DEFAULT_WIKI_URL
    lua_folder_path: str = "./ui"
    fragment_output_path: str = "./fragments"
    annotation_output_path: str = "./library"
    wiki_html_path: str = "Lua function overview - X Community Wiki.html"
    fetch_timeout_ms: int = DEFAULT_TIMEOUT_MS
    output_files: dict[str, str] = field(default_factory=_default_output_files)
    fragment_files: dict[str, str] = field(default_factory=_default_fragment_files)
    base_dir: Path = field(default_factory=Path.cwd, repr=False)

    def _resolve(self, value: str) -> Path:
        path = Path(value)
        return path if path.is_absolute() else self.base_dir / path

    @property
    def lua_folder(self) -> Path:
        return self._resolve(self.lua_folder_path)

    @property
    def fragment_dir(self) -> Path:
        return self._resolve(self.fragment_output_path)

    @property
    def annotation_dir(self) -> Path:
        return self._resolve(self.annotation_output_path)

    @property
    def wiki_html(self) -> Path:
        return self._resolve(self.wiki_html_path)

    def output_path(self, kind: str) -> Path:
        """Annotation file for one output kind.

        Raises:
            ValueError: If kind is not an output kind
        """
        if kind not in OUTPUT_KINDS:
            raise ValueError(f"Unknown output kind: {kind}")
        return self.annotation_dir / self.output_files[kind]

    def fragment_path(self, kind: str) -> Path:
        """JSON fragment file for one record kind or namespace file."""
        return self.fragment_dir / self.fragment_files[kind]

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("base_dir")
        return data

    @classmethod
    def from_dict(cls, data: dict, base_dir: Path) -> "AnnotatorConfig":
        """Merge file values over the defaults; unknown keys are ignored."""
        defaults = cls(base_dir=base_dir)
        known = {k: v for k, v in data.items() if k in defaults.to_dict()}
        for key in ("output_files", "fragment_files"):
            if key in known:
                known[key] = {**getattr(defaults, key), **known[key]}
        return cls(base_dir=base_dir, **known)


def load_config(path: Path | None = None) -> AnnotatorConfig:
    """Load the configuration file, writing defaults when it does not exist.

    An unreadable or malformed file is logged and the defaults are used.

    Args:
        path: Configuration file (default: ./configuration.json)

    Returns:
        The merged configuration with paths relative to the file's directory
    """
    path = path or Path.cwd() / DEFAULT_CONFIG_FILE
    base_dir = path.resolve().parent

    if not path.exists():
        logger.warning(f"Configuration file not found, using defaults: {path}")
        config = AnnotatorConfig(base_dir=base_dir)
        try:
            path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
            logger.info(f"Default configuration saved to {path}")
        except OSError as e:
            logger.warning(f"Could not save default configuration: {e}")
        return config

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("configuration must be a JSON object")
        config = AnnotatorConfig.from_dict(data, base_dir)
        logger.info(f"Loaded configuration from {path}")
        return config
    except (OSError, json.JSONDecodeError, TypeError, ValueError) as e:
        logger.error(f"Error loading configuration: {e}")
        return AnnotatorConfig(base_dir=base_dir)


def ensure_output_dirs(config: AnnotatorConfig) -> None:
    """Create the fragment and annotation directories if missing."""
    for directory in (config.fragment_dir, config.annotation_dir):
        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created output directory: {directory}")
