from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import PurePosixPath


class Culling(enum.Enum):
    FRONT = "front"
    BACK = "back"
    NONE = "none"


@dataclass(frozen=True)
class BlendFunc:
    """``blendFunc`` factors of a stage.  Both empty means "not set"."""

    src: str = ""
    dest: str = ""

    def enabled(self) -> bool:
        return bool(self.src and self.dest)


@dataclass(frozen=True)
class ShaderStage:
    """One ``{ ... }`` block inside a shader.

    ``map`` is either an image path or a ``$``-prefixed engine token such as
    ``$lightmap``.
    """

    map: PurePosixPath | None = None
    blend_func: BlendFunc = field(default_factory=BlendFunc)


@dataclass(frozen=True)
class Quake3Shader:
    """A parsed or synthesized Quake 3 shader.

    ``shader_path`` is the identity of the shader (``textures/base/wall``);
    it never carries an image extension.  ``editor_image`` points at the
    texture the shader decorates, or the texture it was synthesized from.
    """

    shader_path: PurePosixPath
    editor_image: PurePosixPath | None = None
    light_image: PurePosixPath | None = None
    culling: Culling = Culling.FRONT
    surface_parms: frozenset[str] = frozenset()
    stages: tuple[ShaderStage, ...] = ()

    @classmethod
    def from_texture(cls, shader_path: PurePosixPath, texture_path: PurePosixPath) -> Quake3Shader:
        """Implicit shader for a texture that has no authored definition."""
        return cls(shader_path=PurePosixPath(shader_path), editor_image=PurePosixPath(texture_path))

    def texture_path(self) -> PurePosixPath | None:
        """Best image to show for this shader: the editor image, else the first stage map."""
        if self.editor_image is not None:
            return self.editor_image
        for stage in self.stages:
            if stage.map is not None and not str(stage.map).startswith("$"):
                return stage.map
        return None
