"""Link loaded shaders with the textures found on disk.

Each texture ``textures/base/wall.tga`` names the shader ``textures/base/wall``:

- if a real file already exists at that path, the texture is ignored;
- if an authored shader with that identity was loaded, it is claimed by the
  texture and registered there;
- otherwise an implicit shader is synthesized from the texture alone.

Authored shaders that no texture claimed are registered on their own
("standalone") afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import PurePosixPath
from typing import Callable, Iterable

from shaderfs.fs.disk import FileSystem, PathInfo, PathLike, TraversalMode, make_extension_matcher
from shaderfs.overlay.entries import EntryKind, ShaderEntry
from shaderfs.shaders.model import Quake3Shader

logger = logging.getLogger(__name__)

TEXTURE_EXTENSIONS: tuple[str, ...] = (".tga", ".png", ".jpg", ".jpeg")

AddFile = Callable[[PurePosixPath, ShaderEntry], None]


@dataclass
class LinkReport:
    textures: int = 0
    linked: int = 0
    synthesized: int = 0
    standalone: int = 0
    skipped_real: int = 0
    duplicates: int = 0

    @property
    def entries(self) -> int:
        return self.linked + self.synthesized + self.standalone

    def to_dict(self) -> dict[str, int]:
        out = asdict(self)
        out["entries"] = self.entries
        return out


def find_textures(fs: FileSystem, texture_search_paths: Iterable[PathLike]) -> list[PurePosixPath]:
    """Recursively collect image files from every texture directory that exists."""

    matcher = make_extension_matcher(TEXTURE_EXTENSIONS)
    textures: list[PurePosixPath] = []
    for search_path in texture_search_paths:
        if fs.path_info(search_path) != PathInfo.DIRECTORY:
            continue
        textures.extend(fs.find(search_path, TraversalMode.RECURSIVE, matcher))
    return textures


def _first_definitions(shaders: Iterable[Quake3Shader], report: LinkReport) -> dict[PurePosixPath, Quake3Shader]:
    """Index shaders by identity path; the first definition of a path wins."""

    pending: dict[PurePosixPath, Quake3Shader] = {}
    for shader in shaders:
        if shader.shader_path in pending:
            logger.warning("Ignoring duplicate definition of shader %s", shader.shader_path)
            report.duplicates += 1
            continue
        pending[shader.shader_path] = shader
    return pending


def link_shaders(
    fs: FileSystem,
    shaders: Iterable[Quake3Shader],
    texture_search_paths: Iterable[PathLike],
    add_file: AddFile,
) -> LinkReport:
    """Register one entry per texture and per unclaimed shader through *add_file*.

    Only texture enumeration can fail (with
    :class:`~shaderfs.fs.disk.FileSystemError`); this happens before anything
    is registered.
    """

    textures = find_textures(fs, texture_search_paths)

    report = LinkReport(textures=len(textures))
    pending = _first_definitions(shaders, report)
    claimed: set[PurePosixPath] = set()
    registered: set[PurePosixPath] = set()

    def _register(entry: ShaderEntry) -> None:
        registered.add(entry.path)
        add_file(entry.path, entry)

    logger.info("Linking shaders...")

    logger.debug("Linking textures...")
    for texture in textures:
        shader_path = texture.with_suffix("")

        # Real content wins; so does the first texture linked to a path.
        if fs.path_info(shader_path) == PathInfo.FILE:
            logger.debug("Not linking %s: %s exists", texture, shader_path)
            report.skipped_real += 1
            continue
        if shader_path in registered:
            logger.debug("Not linking %s: %s is already linked", texture, shader_path)
            continue

        shader = pending.get(shader_path)
        if shader is not None:
            claimed.add(shader_path)
            _register(ShaderEntry(EntryKind.AUTHORED, shader_path, shader, texture))
            report.linked += 1
        else:
            synthesized = Quake3Shader.from_texture(shader_path, texture)
            _register(ShaderEntry(EntryKind.SYNTHESIZED, shader_path, synthesized, texture))
            report.synthesized += 1

    logger.debug("Linking standalone shaders...")
    standalone = [shader for path, shader in pending.items() if path not in claimed]
    for shader in standalone:
        _register(ShaderEntry(EntryKind.STANDALONE, shader.shader_path, shader))
        report.standalone += 1

    logger.info(
        "Linked %d shaders to textures, synthesized %d, registered %d standalone",
        report.linked,
        report.synthesized,
        report.standalone,
    )
    return report
