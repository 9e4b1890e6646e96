from __future__ import annotations

import logging
from pathlib import PurePosixPath

from shaderfs.fs.disk import FileSystem, PathInfo, PathLike, TraversalMode, make_extension_matcher
from shaderfs.shaders.model import Quake3Shader
from shaderfs.shaders.parser import try_parse_shaders

logger = logging.getLogger(__name__)

SHADER_EXTENSIONS: tuple[str, ...] = (".shader",)


def load_shaders(
    fs: FileSystem,
    shader_search_path: PathLike,
    *,
    malformed: list[PurePosixPath] | None = None,
) -> list[Quake3Shader]:
    """Parse every ``.shader`` script directly inside *shader_search_path*.

    A missing directory yields an empty list.  Listing or opening failures
    raise :class:`~shaderfs.fs.disk.FileSystemError`; a script with a grammar
    error is skipped with a warning (and appended to *malformed* when given).
    """

    if fs.path_info(shader_search_path) != PathInfo.DIRECTORY:
        return []

    paths = fs.find(shader_search_path, TraversalMode.FLAT, make_extension_matcher(SHADER_EXTENSIONS))

    all_shaders: list[Quake3Shader] = []
    for path in paths:
        text = fs.open_file(path).read_text()
        outcome = try_parse_shaders(text, str(path))
        if not outcome.ok:
            logger.warning("Skipping malformed shader file %s: %s", path, outcome.error)
            if malformed is not None:
                malformed.append(path)
            continue
        all_shaders.extend(outcome.shaders)

    logger.info("Loaded %d shaders", len(all_shaders))
    return all_shaders
