from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from shaderfs.config import ShaderFsConfig, load_config
from shaderfs.fs.disk import DiskFileSystem, FileSystemError
from shaderfs.overlay.entries import EntryKind
from shaderfs.overlay.shader_fs import ShaderFileSystem


def _apply_overrides(cfg: ShaderFsConfig, args: argparse.Namespace) -> ShaderFsConfig:
    if args.root:
        cfg.root = args.root
    if args.shader_dir:
        cfg.shader_dir = args.shader_dir
    if args.texture_dirs:
        cfg.texture_dirs = list(args.texture_dirs)
    return cfg


def _cmd_list(shaders: ShaderFileSystem, args: argparse.Namespace) -> int:
    kind = EntryKind(args.kind) if args.kind else None
    for entry in shaders.entries():
        if kind is not None and entry.kind is not kind:
            continue
        print(f"{entry.kind.value}\t{entry.path}")
    return 0


def _cmd_show(shaders: ShaderFileSystem, args: argparse.Namespace) -> int:
    try:
        shader_file = shaders.open_file(args.path)
    except FileSystemError as exc:
        print(f"shaderfs: {exc}", file=sys.stderr)
        return 1
    sys.stdout.write(shader_file.read_text())
    return 0


def _cmd_report(shaders: ShaderFileSystem, _args: argparse.Namespace) -> int:
    report = shaders.last_report
    payload = report.to_dict() if report is not None else {}
    print(json.dumps(payload, indent=2, sort_keys=True))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shaderfs",
        description="Inspect the virtual shader tree built from shader scripts and textures.",
    )
    parser.add_argument("--config", default=None, help="Config JSON (default: ~/.shaderfs/config.json).")
    parser.add_argument("--root", default=None, help="Game/mod directory; other paths are relative to it.")
    parser.add_argument("--shader-dir", default=None, help='Shader script directory (default: "scripts").')
    parser.add_argument(
        "--texture-dir",
        dest="texture_dirs",
        action="append",
        default=None,
        help='Texture directory, searched recursively. Repeatable (default: "textures").',
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("list", help="List virtual shader entries.")
    sp.add_argument("--kind", choices=[k.value for k in EntryKind], default=None, help="Only list entries of this kind.")
    sp.set_defaults(fn=_cmd_list)

    sp = sub.add_parser("show", help="Print the shader script of one virtual path.")
    sp.add_argument("path", help="Virtual shader path, e.g. textures/base/wall.")
    sp.set_defaults(fn=_cmd_show)

    sp = sub.add_parser("report", help="Print the load/link summary as JSON.")
    sp.set_defaults(fn=_cmd_report)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cfg = _apply_overrides(load_config(Path(args.config) if args.config else None), args)
    try:
        shaders = ShaderFileSystem(DiskFileSystem(cfg.effective_root()), cfg.shader_dir, cfg.texture_dirs)
    except FileSystemError as exc:
        print(f"shaderfs: {exc}", file=sys.stderr)
        return 2
    return int(args.fn(shaders, args))


if __name__ == "__main__":
    raise SystemExit(main())
