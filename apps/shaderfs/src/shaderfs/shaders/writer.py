from __future__ import annotations

from pathlib import PurePosixPath

from shaderfs.shaders.model import Culling, Quake3Shader


def _token(value: str | PurePosixPath) -> str:
    """Quote *value* when it would not read back as a single word."""
    text = str(value)
    if not text or any(ch.isspace() or ch in "{}" for ch in text):
        return f'"{text}"'
    return text


def write_shader(shader: Quake3Shader) -> str:
    """Render *shader* as ``.shader`` script text.

    Only the fields held by :class:`Quake3Shader` are written, so the output
    parses back to an equal record.
    """

    lines = [_token(shader.shader_path), "{"]
    if shader.editor_image is not None:
        lines.append(f"\tqer_editorimage {_token(shader.editor_image)}")
    if shader.light_image is not None:
        lines.append(f"\tq3map_lightimage {_token(shader.light_image)}")
    for parm in sorted(shader.surface_parms):
        lines.append(f"\tsurfaceparm {_token(parm)}")
    if shader.culling is not Culling.FRONT:
        lines.append(f"\tcull {shader.culling.value}")
    for stage in shader.stages:
        lines.append("\t{")
        if stage.map is not None:
            lines.append(f"\t\tmap {_token(stage.map)}")
        if stage.blend_func.enabled():
            lines.append(f"\t\tblendFunc {stage.blend_func.src} {stage.blend_func.dest}")
        lines.append("\t}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_shaders(shaders: list[Quake3Shader]) -> str:
    return "\n".join(write_shader(s) for s in shaders)
