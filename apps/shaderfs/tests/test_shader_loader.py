from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

import pytest

from shaderfs.fs.disk import DiskFileSystem, File, FileSystemError, PathLike
from shaderfs.overlay.loader import load_shaders


def _touch(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class _FailingOpenFileSystem(DiskFileSystem):
    def open_file(self, path: PathLike) -> File:
        raise FileSystemError(f"Failed to open file {path}: simulated")


def test_missing_shader_directory_yields_no_shaders(tmp_path: Path) -> None:
    assert load_shaders(DiskFileSystem(tmp_path), "scripts") == []


def test_malformed_file_is_skipped_and_others_still_load(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    _touch(tmp_path / "scripts" / "good.shader", "textures/good\n{\n\tsurfaceparm nodraw\n}\n")
    _touch(tmp_path / "scripts" / "bad.shader", "textures/bad\n{\n\t{\n\t\tmap\n")
    malformed: list[PurePosixPath] = []

    with caplog.at_level(logging.INFO, logger="shaderfs.overlay.loader"):
        shaders = load_shaders(DiskFileSystem(tmp_path), "scripts", malformed=malformed)

    assert [s.shader_path for s in shaders] == [PurePosixPath("textures/good")]
    assert malformed == [PurePosixPath("scripts/bad.shader")]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "bad.shader" in warnings[0].getMessage()
    assert "Loaded 1 shaders" in caplog.text


def test_only_direct_shader_scripts_are_loaded(tmp_path: Path) -> None:
    _touch(tmp_path / "scripts" / "a.shader", "textures/a { }\ntextures/b { }\n")
    _touch(tmp_path / "scripts" / "B.SHADER", "textures/c { }\n")
    _touch(tmp_path / "scripts" / "readme.txt", "not a shader {")
    _touch(tmp_path / "scripts" / "nested" / "d.shader", "textures/d { }\n")

    shaders = load_shaders(DiskFileSystem(tmp_path), "scripts")

    assert sorted(str(s.shader_path) for s in shaders) == ["textures/a", "textures/b", "textures/c"]


def test_open_failure_is_fatal(tmp_path: Path) -> None:
    _touch(tmp_path / "scripts" / "a.shader", "textures/a { }\n")

    with pytest.raises(FileSystemError, match="a.shader"):
        load_shaders(_FailingOpenFileSystem(tmp_path), "scripts")
