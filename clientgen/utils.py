# File: clientgen/utils.py
"""
clientgen - Utility Functions & Helpers
========================================
String transformation, comment formatting, file I/O and timing helpers
shared by every emitter.

Performance strategy:
- Pure string conversions are decorated with ``@lru_cache(maxsize=None)``;
  the same entity names are converted many times per document.
- Directory helpers are idempotent.
- No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("clientgen.utils")

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def capitalize(name: str) -> str:
    """Upper-case the first character only (``userPost`` → ``UserPost``)."""
    if not name:
        return ""
    return name[0].upper() + name[1:]


@functools.lru_cache(maxsize=None)
def lower_case(name: str) -> str:
    """Lower-case the first character only (``UserPost`` → ``userPost``)."""
    if not name:
        return ""
    return name[0].lower() + name[1:]


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Naive English pluralisation sufficient for generated documentation.

    Casing of the first character is preserved.
    """
    if not name:
        return ""

    lower: str = name.lower()

    irregulars: Dict[str, str] = {
        "person": "people",
        "child": "children",
        "man": "men",
        "woman": "women",
        "mouse": "mice",
        "goose": "geese",
        "tooth": "teeth",
        "foot": "feet",
        "datum": "data",
        "index": "indices",
        "matrix": "matrices",
        "vertex": "vertices",
        "axis": "axes",
        "crisis": "crises",
        "analysis": "analyses",
        "status": "statuses",
        "address": "addresses",
    }

    if lower in irregulars:
        plural: str = irregulars[lower]
        if name[0].isupper():
            return plural[0].upper() + plural[1:]
        return plural

    if lower.endswith(("sh", "ch", "x", "z", "ss", "s")):
        return name + "es"
    if lower.endswith("y") and len(name) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"
    if lower.endswith("fe"):
        return name[:-2] + "ves"
    if lower.endswith("f") and not lower.endswith("ff"):
        return name[:-1] + "ves"

    return name + "s"


# ---------------------------------------------------------------------------
# Indentation & comment helpers
# ---------------------------------------------------------------------------


def indent(text: str, size: int = 2) -> str:
    """
    Indent every line of *text* by *size* spaces.

    Blank lines stay empty so the output carries no trailing whitespace.
    """
    prefix: str = " " * size
    return "\n".join(prefix + line if line.strip() else line for line in text.split("\n"))


def wrap_comment(text: str) -> str:
    """
    Wrap (possibly multi-line) text into a ``/** ... **/`` doc block.

    A ``*/`` inside *text* is written as ``*\\/`` so it cannot end the block.
    """
    text = text.replace("*/", "*\\/")
    body: str = "\n".join(f" * {line}".rstrip() for line in text.split("\n"))
    return f"/**\n{body}\n**/"


def unique_by(items: Iterable[T], key: Callable[[T], str]) -> List[T]:
    """
    Drop items whose key was already seen; the first occurrence wins and the
    original order of the survivors is kept.
    """
    seen: Dict[str, T] = {}
    for item in items:
        item_key: str = key(item)
        if item_key not in seen:
            seen[item_key] = item
    return list(seen.values())


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("render declarations") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "capitalize",
    "lower_case",
    "to_plural",
    "indent",
    "wrap_comment",
    "unique_by",
    "ensure_directory",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("clientgen.utils loaded: %d public symbols.", len(__all__))
