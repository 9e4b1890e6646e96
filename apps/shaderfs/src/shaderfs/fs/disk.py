"""Real-filesystem access for the shader overlay.

All paths handed to and returned from :class:`DiskFileSystem` are relative
:class:`~pathlib.PurePosixPath` objects rooted at the filesystem root, e.g.
``scripts/base.shader`` or ``textures/base/wall.tga``.  The overlay never sees
absolute OS paths.

Usage::

    from shaderfs.fs.disk import DiskFileSystem, TraversalMode, make_extension_matcher

    fs = DiskFileSystem("/games/q3/baseq3")
    for path in fs.find("scripts", TraversalMode.FLAT, make_extension_matcher([".shader"])):
        print(path, len(fs.open_file(path).read_text()))
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, Protocol, Union

PathLike = Union[str, PurePosixPath]
PathMatcher = Callable[[PurePosixPath], bool]


class FileSystemError(Exception):
    """Raised when a directory listing or file open fails.

    This is the single fatal error of a load pass; the message names the
    operation and the path involved.
    """


class PathInfo(enum.Enum):
    DIRECTORY = "directory"
    FILE = "file"
    UNKNOWN = "unknown"


class TraversalMode(enum.Enum):
    FLAT = "flat"
    RECURSIVE = "recursive"


@dataclass(frozen=True)
class File:
    """An opened file: its path and its full content."""

    path: PurePosixPath
    data: bytes

    def read_bytes(self) -> bytes:
        return self.data

    def read_text(self, encoding: str = "utf-8") -> str:
        return self.data.decode(encoding, errors="replace")


class FileSystem(Protocol):
    def path_info(self, path: PathLike) -> PathInfo: ...

    def find(self, path: PathLike, mode: TraversalMode, matcher: PathMatcher) -> list[PurePosixPath]: ...

    def open_file(self, path: PathLike) -> File: ...


def make_extension_matcher(extensions: Iterable[str]) -> PathMatcher:
    """Return a predicate accepting paths whose last suffix is in *extensions*.

    Comparison is case-insensitive, so ``WALL.TGA`` matches ``.tga``.
    """

    wanted = frozenset(ext.lower() for ext in extensions)

    def _matches(path: PurePosixPath) -> bool:
        return path.suffix.lower() in wanted

    return _matches


def normalize_path(path: PathLike) -> PurePosixPath:
    """Convert *path* to a relative POSIX path, rejecting root escapes."""

    p = PurePosixPath(str(path).replace("\\", "/"))
    if p.is_absolute() or ".." in p.parts:
        raise FileSystemError(f"Path escapes filesystem root: {path}")
    return p


class DiskFileSystem:
    """Read-only view of a directory on disk.

    ``find`` results are sorted so that repeated passes see the same order;
    callers should still not rely on any particular order.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _abs(self, path: PathLike) -> Path:
        return self._root.joinpath(*normalize_path(path).parts)

    def path_info(self, path: PathLike) -> PathInfo:
        try:
            p = self._abs(path)
        except FileSystemError:
            return PathInfo.UNKNOWN
        if p.is_dir():
            return PathInfo.DIRECTORY
        if p.is_file():
            return PathInfo.FILE
        return PathInfo.UNKNOWN

    def find(self, path: PathLike, mode: TraversalMode, matcher: PathMatcher) -> list[PurePosixPath]:
        base = self._abs(path)
        if not base.is_dir():
            raise FileSystemError(f"Failed to list directory {path}: not a directory")
        try:
            candidates = base.rglob("*") if mode is TraversalMode.RECURSIVE else base.iterdir()
            out: list[PurePosixPath] = []
            for p in candidates:
                if not p.is_file():
                    continue
                rel = PurePosixPath(p.relative_to(self._root).as_posix())
                if matcher(rel):
                    out.append(rel)
        except OSError as exc:
            raise FileSystemError(f"Failed to list directory {path}: {exc}") from exc
        out.sort()
        return out

    def open_file(self, path: PathLike) -> File:
        rel = normalize_path(path)
        p = self._abs(rel)
        try:
            data = p.read_bytes()
        except OSError as exc:
            raise FileSystemError(f"Failed to open file {rel}: {exc}") from exc
        return File(path=rel, data=data)
