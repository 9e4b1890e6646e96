from __future__ import annotations

from pathlib import PurePosixPath
from typing import Iterator, Mapping

from shaderfs.fs.disk import FileSystemError, PathInfo, PathLike, PathMatcher, TraversalMode, normalize_path
from shaderfs.overlay.entries import ShaderEntry, ShaderFile, open_entry

_ROOT = PurePosixPath()


class VirtualTree:
    """Path-keyed store of lazy shader entries.

    Directories are not stored; every proper prefix of an entry path is
    reported as a directory.
    """

    def __init__(self) -> None:
        self._files: dict[PurePosixPath, ShaderEntry] = {}
        self._dirs: set[PurePosixPath] = {_ROOT}

    def add_file(self, path: PathLike, entry: ShaderEntry) -> None:
        p = normalize_path(path)
        self._files[p] = entry
        self._dirs.update(p.parents)

    def _replace_files(self, files: Mapping[PurePosixPath, ShaderEntry]) -> None:
        self._files = {}
        self._dirs = {_ROOT}
        for path, entry in files.items():
            self.add_file(path, entry)

    def path_info(self, path: PathLike) -> PathInfo:
        try:
            p = normalize_path(path)
        except FileSystemError:
            return PathInfo.UNKNOWN
        if p in self._files:
            return PathInfo.FILE
        if p in self._dirs:
            return PathInfo.DIRECTORY
        return PathInfo.UNKNOWN

    def entry(self, path: PathLike) -> ShaderEntry | None:
        try:
            return self._files.get(normalize_path(path))
        except FileSystemError:
            return None

    def open_file(self, path: PathLike) -> ShaderFile:
        entry = self.entry(path)
        if entry is None:
            raise FileSystemError(f"File not found: {path}")
        return open_entry(entry)

    def find(
        self,
        path: PathLike = _ROOT,
        mode: TraversalMode = TraversalMode.FLAT,
        matcher: PathMatcher | None = None,
    ) -> list[PurePosixPath]:
        base = normalize_path(path)
        if base not in self._dirs:
            raise FileSystemError(f"Failed to list directory {path}: not a directory")
        out: list[PurePosixPath] = []
        for p in self._files:
            if mode is TraversalMode.FLAT:
                if p.parent != base:
                    continue
            elif base not in p.parents:
                continue
            if matcher is None or matcher(p):
                out.append(p)
        out.sort()
        return out

    def entries(self) -> Iterator[ShaderEntry]:
        for path in sorted(self._files):
            yield self._files[path]

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, PurePosixPath)):
            return False
        return self.path_info(path) == PathInfo.FILE
