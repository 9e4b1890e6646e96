from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import PurePosixPath

from shaderfs.shaders.model import Quake3Shader
from shaderfs.shaders.writer import write_shader


class EntryKind(enum.Enum):
    # Authored shader claimed by a texture with the same identity path.
    AUTHORED = "authored"
    # Authored shader with no texture on disk.
    STANDALONE = "standalone"
    # Implicit shader derived from a texture file alone.
    SYNTHESIZED = "synthesized"


@dataclass(frozen=True)
class ShaderEntry:
    """A virtual-tree binding: what :func:`open_entry` will build for ``path``.

    Entries are plain values; nothing is constructed until a caller opens the
    path.  ``shader`` is immutable, so the entry owns it independently of the
    lists the linker worked on.
    """

    kind: EntryKind
    path: PurePosixPath
    shader: Quake3Shader
    texture: PurePosixPath | None = None


@dataclass(frozen=True)
class ShaderFile:
    """The object handed out when a virtual shader path is opened."""

    path: PurePosixPath
    kind: EntryKind
    shader: Quake3Shader

    def read_text(self) -> str:
        return write_shader(self.shader)

    def read_bytes(self) -> bytes:
        return self.read_text().encode("utf-8")


def open_entry(entry: ShaderEntry) -> ShaderFile:
    """Build the file object for *entry*.  Safe to call any number of times."""
    return ShaderFile(path=entry.path, kind=entry.kind, shader=entry.shader)
