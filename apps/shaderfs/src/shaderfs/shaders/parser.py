"""Quake 3 ``.shader`` script parser.

A shader script is a sequence of named blocks::

    textures/base/wall
    {
        qer_editorimage textures/base/wall_editor.tga
        surfaceparm nomarks
        cull none
        {
            map $lightmap
        }
        {
            map textures/base/wall.tga
            blendFunc filter
        }
    }

Only the keys the overlay cares about are interpreted (editor/light image,
surface parameters, culling, stage maps and blend functions).  Everything else
is skipped up to the end of its line, so engine-specific directives do not
break parsing.

Usage::

    from shaderfs.shaders.parser import parse_shaders, try_parse_shaders

    shaders = parse_shaders(text)               # raises ShaderParseError
    outcome = try_parse_shaders(text, "a.shader")
    if not outcome.ok:
        print(outcome.error)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from shaderfs.shaders.model import BlendFunc, Culling, Quake3Shader, ShaderStage

logger = logging.getLogger(__name__)


class ShaderParseError(ValueError):
    """Grammar error in a shader script, with a 1-based source position."""

    def __init__(self, message: str, *, line: int, column: int) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"line {line}, column {column}: {message}")


@dataclass(frozen=True)
class ParseOutcome:
    """Result of parsing one script: either shaders, or the error that stopped parsing."""

    shaders: tuple[Quake3Shader, ...] = ()
    error: ShaderParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Tokeniser
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(
    r"(?P<comment>//[^\n]*|/\*.*?\*/)"
    r"|(?P<open_comment>/\*)"
    r"|(?P<newline>\n)"
    r"|(?P<brace>[{}])"
    r'|"(?P<quoted>[^"\n]*)"'
    r'|(?P<stray_quote>")'
    r'|(?P<word>[^\s{}"]+)',
    re.DOTALL,
)

_EOL = "eol"
_EOF = "eof"
_WORD = "word"


@dataclass(frozen=True)
class _Token:
    kind: str  # "word" | "{" | "}" | "eol" | "eof"
    text: str
    line: int
    column: int


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    line = 1
    line_start = 0
    scanned = 0

    for m in _TOKEN_RE.finditer(text):
        # Advance the line counter over everything between the previous match and this one.
        start = m.start()
        nl = text.count("\n", scanned, start)
        if nl:
            line += nl
            line_start = text.rfind("\n", scanned, start) + 1
        scanned = start
        column = start - line_start + 1

        kind = m.lastgroup
        if kind == "open_comment":
            raise ShaderParseError("Unterminated block comment", line=line, column=column)
        if kind == "stray_quote":
            raise ShaderParseError("Unterminated quoted string", line=line, column=column)
        if kind == "newline":
            tokens.append(_Token(_EOL, "\n", line, column))
        elif kind == "brace":
            tokens.append(_Token(m.group(), m.group(), line, column))
        elif kind == "quoted":
            tokens.append(_Token(_WORD, m.group("quoted"), line, column))
        elif kind == "word":
            tokens.append(_Token(_WORD, m.group(), line, column))
        # Comments produce no tokens; multi-line block comments are handled by the counter above.

    nl = text.count("\n", scanned)
    if nl:
        line += nl
        line_start = text.rfind("\n", scanned) + 1
    tokens.append(_Token(_EOF, "", line, len(text) - line_start + 1))
    return tokens


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

_CULL_MODES: dict[str, Culling] = {
    "front": Culling.FRONT,
    "back": Culling.BACK,
    "backside": Culling.BACK,
    "backsided": Culling.BACK,
    "none": Culling.NONE,
    "disable": Culling.NONE,
    "twosided": Culling.NONE,
}

# blendFunc shorthands, see the Quake 3 shader manual.
_BLEND_SHORTHANDS: dict[str, BlendFunc] = {
    "add": BlendFunc("GL_ONE", "GL_ONE"),
    "filter": BlendFunc("GL_DST_COLOR", "GL_ZERO"),
    "blend": BlendFunc("GL_SRC_ALPHA", "GL_ONE_MINUS_SRC_ALPHA"),
}


def _to_path(raw: str) -> PurePosixPath:
    return PurePosixPath(raw.replace("\\", "/"))


class _Parser:
    def __init__(self, text: str, source: str) -> None:
        self._tokens = _tokenize(text)
        self._pos = 0
        self._source = source or "<string>"

    # -- token helpers ------------------------------------------------------

    def _peek(self) -> _Token:
        return self._tokens[self._pos]

    def _next(self) -> _Token:
        tok = self._tokens[self._pos]
        if tok.kind != _EOF:
            self._pos += 1
        return tok

    def _skip_eols(self) -> None:
        while self._peek().kind == _EOL:
            self._pos += 1

    def _skip_line(self) -> None:
        """Skip the remaining words of the current line (braces are left in place)."""
        while self._peek().kind == _WORD:
            self._pos += 1

    def _error(self, tok: _Token, message: str) -> ShaderParseError:
        return ShaderParseError(message, line=tok.line, column=tok.column)

    def _argument(self, key: _Token) -> str:
        tok = self._peek()
        if tok.kind != _WORD:
            raise self._error(key, f"Missing argument for '{key.text}'")
        self._pos += 1
        return tok.text

    # -- grammar ------------------------------------------------------------

    def parse(self) -> list[Quake3Shader]:
        shaders: list[Quake3Shader] = []
        while True:
            self._skip_eols()
            tok = self._next()
            if tok.kind == _EOF:
                return shaders
            if tok.kind != _WORD:
                raise self._error(tok, f"Expected shader name, got '{tok.text}'")
            self._skip_eols()
            brace = self._next()
            if brace.kind != "{":
                raise self._error(brace, f"Expected '{{' after shader name '{tok.text}'")
            shaders.append(self._parse_body(tok))

    def _parse_body(self, name: _Token) -> Quake3Shader:
        editor_image: PurePosixPath | None = None
        light_image: PurePosixPath | None = None
        culling = Culling.FRONT
        surface_parms: set[str] = set()
        stages: list[ShaderStage] = []

        while True:
            self._skip_eols()
            tok = self._next()
            if tok.kind == _EOF:
                raise self._error(tok, f"Unexpected end of file in shader '{name.text}'")
            if tok.kind == "}":
                break
            if tok.kind == "{":
                stages.append(self._parse_stage())
                continue

            key = tok.text.lower()
            if key == "qer_editorimage":
                editor_image = _to_path(self._argument(tok))
            elif key == "q3map_lightimage":
                light_image = _to_path(self._argument(tok))
            elif key == "surfaceparm":
                surface_parms.add(self._argument(tok).lower())
            elif key == "cull":
                value = self._argument(tok)
                mode = _CULL_MODES.get(value.lower())
                if mode is None:
                    logger.warning(
                        "%s:%d: unknown cull mode %r in shader %s; using front",
                        self._source,
                        tok.line,
                        value,
                        name.text,
                    )
                    mode = Culling.FRONT
                culling = mode
            self._skip_line()

        return Quake3Shader(
            shader_path=_to_path(name.text),
            editor_image=editor_image,
            light_image=light_image,
            culling=culling,
            surface_parms=frozenset(surface_parms),
            stages=tuple(stages),
        )

    def _parse_stage(self) -> ShaderStage:
        image: PurePosixPath | None = None
        blend = BlendFunc()

        while True:
            self._skip_eols()
            tok = self._next()
            if tok.kind == _EOF:
                raise self._error(tok, "Unexpected end of file in shader stage")
            if tok.kind == "}":
                break
            if tok.kind == "{":
                raise self._error(tok, "Unexpected '{' inside shader stage")

            key = tok.text.lower()
            if key in ("map", "clampmap"):
                image = _to_path(self._argument(tok))
            elif key == "animmap":
                self._argument(tok)  # frequency
                image = _to_path(self._argument(tok))
            elif key == "blendfunc":
                src = self._argument(tok)
                shorthand = _BLEND_SHORTHANDS.get(src.lower())
                if shorthand is not None:
                    blend = shorthand
                else:
                    dest = self._argument(tok)
                    blend = BlendFunc(src.upper(), dest.upper())
            self._skip_line()

        return ShaderStage(map=image, blend_func=blend)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_shaders(text: str, *, source: str = "") -> list[Quake3Shader]:
    """Parse all shaders in *text*.

    Raises :class:`ShaderParseError` on the first grammar error.
    """

    return _Parser(text, source).parse()


def try_parse_shaders(text: str, source: str = "") -> ParseOutcome:
    """Like :func:`parse_shaders`, but reports a grammar error as a value."""

    try:
        return ParseOutcome(shaders=tuple(parse_shaders(text, source=source)))
    except ShaderParseError as exc:
        return ParseOutcome(error=exc)
