"""Discover and read the Lua files of a corpus."""

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class CorpusError(Exception):
    """The corpus root cannot be used at all."""

    def __init__(self, message: str, phase: str = "discovery"):
        super().__init__(message)
        self.phase = phase


@dataclass
class SourceFile:
    """One corpus file and its text."""

    path: str
    text: str

    @property
    def name(self) -> str:
        return Path(self.path).name


def discover_lua_files(root: Path) -> list[Path]:
    """Find every .lua file below a directory, sorted by path.

    Raises:
        CorpusError: If the root does not exist or is not a directory
    """
    if not root.is_dir():
        raise CorpusError(f"Lua folder not found: {root}")
    return sorted(p for p in root.rglob("*.lua") if p.is_file())


def read_corpus(root: Path) -> tuple[list[SourceFile], list[tuple[str, str]]]:
    """Read every Lua file below root as UTF-8.

    Unreadable files are logged and skipped.

    Args:
        root: Corpus directory

    Returns:
        (files read, [(path, error message), ...] for skipped files)
    """
    files = []
    failures = []

    for path in discover_lua_files(root):
        try:
            text = path.read_text(encoding="utf-8")
            files.append(SourceFile(path=str(path), text=text))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read {path}: {e}")
            failures.append((str(path), str(e)))

    logger.info(f"Found {len(files)} Lua files to analyze")
    return files, failures
