from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterable

from shaderfs.fs.disk import FileSystem, PathLike, normalize_path
from shaderfs.overlay.entries import ShaderEntry
from shaderfs.overlay.linker import LinkReport, link_shaders
from shaderfs.overlay.loader import load_shaders
from shaderfs.overlay.tree import VirtualTree


@dataclass(frozen=True)
class OverlayReport:
    """Summary of one successful load-and-link pass."""

    shaders_loaded: int = 0
    malformed_files: tuple[PurePosixPath, ...] = ()
    link: LinkReport = field(default_factory=LinkReport)

    def to_dict(self) -> dict[str, object]:
        return {
            "shaders_loaded": self.shaders_loaded,
            "malformed_files": [str(p) for p in self.malformed_files],
            **self.link.to_dict(),
        }


class ShaderFileSystem(VirtualTree):
    """Read-only overlay exposing shaders from scripts and textures as virtual files.

    Construction runs the load-and-link pass; :meth:`reload` runs it again.
    The pass either commits completely or, on a
    :class:`~shaderfs.fs.disk.FileSystemError`, leaves the current tree as it
    was and re-raises.

    Typical usage::

        fs = DiskFileSystem(game_dir)
        shaders = ShaderFileSystem(fs, "scripts", ["textures"])
        wall = shaders.open_file("textures/base/wall").shader
    """

    def __init__(
        self,
        fs: FileSystem,
        shader_search_path: PathLike,
        texture_search_paths: Iterable[PathLike],
    ) -> None:
        super().__init__()
        self._fs = fs
        self._shader_search_path = normalize_path(shader_search_path)
        self._texture_search_paths = tuple(normalize_path(p) for p in texture_search_paths)
        self._last_report: OverlayReport | None = None
        self.reload()

    @property
    def shader_search_path(self) -> PurePosixPath:
        return self._shader_search_path

    @property
    def texture_search_paths(self) -> tuple[PurePosixPath, ...]:
        return self._texture_search_paths

    @property
    def last_report(self) -> OverlayReport | None:
        return self._last_report

    def reload(self) -> None:
        staged: dict[PurePosixPath, ShaderEntry] = {}
        malformed: list[PurePosixPath] = []

        shaders = load_shaders(self._fs, self._shader_search_path, malformed=malformed)
        link = link_shaders(self._fs, shaders, self._texture_search_paths, staged.__setitem__)

        self._replace_files(staged)
        self._last_report = OverlayReport(
            shaders_loaded=len(shaders),
            malformed_files=tuple(malformed),
            link=link,
        )
