from __future__ import annotations

import logging
from pathlib import PurePosixPath

import pytest

from shaderfs.shaders.model import BlendFunc, Culling, Quake3Shader
from shaderfs.shaders.parser import ShaderParseError, parse_shaders, try_parse_shaders
from shaderfs.shaders.writer import write_shader

_SAMPLE = """\
// base textures
textures/base/wall
{
	qer_editorimage textures/base/wall_ed.tga
	q3map_lightimage textures/base/wall_glow.tga
	surfaceparm nomarks
	surfaceparm NOIMPACT
	cull twosided
	tessSize 64 /* engine-only */
	{
		map $lightmap
		rgbGen identity
	}
	{
		map textures/base/wall.tga
		blendFunc filter
	}
	{ clampmap textures/base/glow.tga
	  blendfunc gl_one gl_one_minus_src_alpha }
}

textures/base/plain
{
	{
		animMap 10 textures/base/a1.tga textures/base/a2.tga
	}
}
"""


def test_parse_shader_keys_and_stages() -> None:
    shaders = parse_shaders(_SAMPLE)
    assert [s.shader_path for s in shaders] == [
        PurePosixPath("textures/base/wall"),
        PurePosixPath("textures/base/plain"),
    ]

    wall = shaders[0]
    assert wall.editor_image == PurePosixPath("textures/base/wall_ed.tga")
    assert wall.light_image == PurePosixPath("textures/base/wall_glow.tga")
    assert wall.surface_parms == frozenset({"nomarks", "noimpact"})
    assert wall.culling is Culling.NONE
    assert len(wall.stages) == 3
    assert wall.stages[0].map == PurePosixPath("$lightmap")
    assert not wall.stages[0].blend_func.enabled()
    assert wall.stages[1].map == PurePosixPath("textures/base/wall.tga")
    assert wall.stages[1].blend_func == BlendFunc("GL_DST_COLOR", "GL_ZERO")
    assert wall.stages[2].map == PurePosixPath("textures/base/glow.tga")
    assert wall.stages[2].blend_func == BlendFunc("GL_ONE", "GL_ONE_MINUS_SRC_ALPHA")
    assert wall.texture_path() == PurePosixPath("textures/base/wall_ed.tga")

    plain = shaders[1]
    assert plain.editor_image is None
    assert plain.culling is Culling.FRONT
    assert plain.stages[0].map == PurePosixPath("textures/base/a1.tga")
    assert plain.texture_path() == PurePosixPath("textures/base/a1.tga")


def test_texture_path_skips_engine_tokens() -> None:
    shaders = parse_shaders("textures/sky\n{\n{\nmap $whiteimage\n}\n}\n")
    assert shaders[0].texture_path() is None


def test_parse_empty_and_comment_only_text() -> None:
    assert parse_shaders("") == []
    assert parse_shaders("// nothing here\n/* still\nnothing */\n") == []


def test_missing_argument_reports_key_position() -> None:
    with pytest.raises(ShaderParseError) as info:
        parse_shaders("a\n{\n  surfaceparm\n}\n")
    assert info.value.line == 3
    assert info.value.column == 3
    assert "surfaceparm" in info.value.message


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("textures/x\n{\n surfaceparm nodraw\n", "end of file in shader 'textures/x'"),
        ("}\n", "Expected shader name"),
        ("textures/x surfaceparm\n", "Expected '{'"),
        ("textures/x\n{\n{\n map a.tga\n", "end of file in shader stage"),
        ("textures/x\n{\n{\n{\n}\n}\n}\n", "Unexpected '{'"),
        ("textures/x { /* oops", "Unterminated block comment"),
    ],
)
def test_grammar_errors(text: str, fragment: str) -> None:
    with pytest.raises(ShaderParseError, match=fragment):
        parse_shaders(text)


def test_try_parse_reports_error_as_value() -> None:
    bad = try_parse_shaders("textures/x {", "bad.shader")
    assert not bad.ok
    assert bad.shaders == ()
    assert isinstance(bad.error, ShaderParseError)

    good = try_parse_shaders("textures/x { }", "good.shader")
    assert good.ok
    assert good.shaders == (Quake3Shader(shader_path=PurePosixPath("textures/x")),)


def test_unknown_cull_mode_warns_and_defaults_to_front(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="shaderfs.shaders.parser"):
        shaders = parse_shaders("textures/x\n{\ncull sideways\n}\n", source="odd.shader")
    assert shaders[0].culling is Culling.FRONT
    assert "odd.shader" in caplog.text
    assert "sideways" in caplog.text


def test_written_shader_parses_back_equal() -> None:
    for shader in parse_shaders(_SAMPLE):
        assert parse_shaders(write_shader(shader)) == [shader]

    implicit = Quake3Shader.from_texture(PurePosixPath("textures/bar"), PurePosixPath("textures/bar.png"))
    assert parse_shaders(write_shader(implicit)) == [implicit]


def test_names_and_paths_with_spaces_are_written_quoted() -> None:
    text = '"textures/my wall"\n{\n\tqer_editorimage "textures/my wall.tga"\n\t{\n\t\tmap "textures/my wall.tga"\n\t}\n}\n'
    shader = parse_shaders(text)[0]
    assert shader.shader_path == PurePosixPath("textures/my wall")

    written = write_shader(shader)

    assert written.startswith('"textures/my wall"\n')
    assert 'qer_editorimage "textures/my wall.tga"' in written
    assert parse_shaders(written) == [shader]
