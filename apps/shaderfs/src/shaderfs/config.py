"""Persistent overlay settings stored at ~/.shaderfs/config.json."""

from __future__ import annotations

import json
import logging
import os
import secrets
from dataclasses import asdict, dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ShaderFsConfig:
    """Where the overlay finds its inputs.  Directories are relative to ``root``."""

    # Game/mod directory all other paths are relative to.  Empty means the current directory.
    root: str = ""
    # Directory holding the *.shader scripts (not searched recursively).
    shader_dir: str = "scripts"
    # Directories searched recursively for texture images, in order.
    texture_dirs: list[str] = field(default_factory=lambda: ["textures"])
    # Where `mount_from_config` mounts the overlay in Panda3D.
    panda_mount_point: str = "/shaders"

    def effective_root(self) -> Path:
        return Path(self.root).expanduser().resolve() if self.root else Path.cwd()


# ── persistence ──────────────────────────────────────────────


def _config_dir() -> Path:
    override = os.environ.get("SHADERFS_CONFIG_DIR")
    if override:
        return Path(override)
    return Path.home() / ".shaderfs"


def config_path() -> Path:
    return _config_dir() / "config.json"


def load_config(path: Path | None = None) -> ShaderFsConfig:
    """Load settings from *path* (default: :func:`config_path`).

    Missing or unreadable files, and fields of the wrong type, fall back to
    defaults.
    """

    p = Path(path) if path is not None else config_path()
    if not p.exists():
        return ShaderFsConfig()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", p, exc)
        return ShaderFsConfig()
    if not isinstance(raw, dict):
        logger.warning("Ignoring config %s: expected JSON object, got %s", p, type(raw).__name__)
        return ShaderFsConfig()

    kwargs: dict = {}
    for name in ("root", "shader_dir", "panda_mount_point"):
        val = raw.get(name)
        if isinstance(val, str):
            kwargs[name] = val
    dirs = raw.get("texture_dirs")
    if isinstance(dirs, str):
        kwargs["texture_dirs"] = [dirs]
    elif isinstance(dirs, list):
        kwargs["texture_dirs"] = [d for d in dirs if isinstance(d, str) and d.strip()]
    return ShaderFsConfig(**kwargs)


def save_config(cfg: ShaderFsConfig, path: Path | None = None) -> None:
    p = Path(path) if path is not None else config_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_name(f"{p.name}.{os.getpid()}.{secrets.token_hex(4)}.tmp")
    tmp.write_text(
        json.dumps(asdict(cfg), indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    tmp.replace(p)
