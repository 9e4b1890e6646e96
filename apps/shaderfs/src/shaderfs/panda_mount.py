from __future__ import annotations

import logging

from panda3d.core import Filename, VirtualFileMountRamdisk, VirtualFileSystem

from shaderfs.config import ShaderFsConfig
from shaderfs.fs.disk import DiskFileSystem, FileSystemError
from shaderfs.overlay.shader_fs import ShaderFileSystem
from shaderfs.overlay.tree import VirtualTree

logger = logging.getLogger(__name__)


def mount_into_panda_vfs(
    tree: VirtualTree,
    mount_point: str = "/shaders",
    vfs: VirtualFileSystem | None = None,
) -> VirtualFileMountRamdisk:
    """
    Expose the overlay to Panda3D by writing every entry, as shader script text,
    into a ramdisk mounted at *mount_point*.

    This opens every entry up front.  Call it again after ``reload()`` (with a
    fresh mount) to pick up changes.
    """

    vfs = vfs if vfs is not None else VirtualFileSystem.get_global_ptr()
    root = "/" + mount_point.strip("/")
    prefix = root.rstrip("/")

    mount = VirtualFileMountRamdisk()
    if not vfs.mount(mount, Filename(root), 0):
        raise FileSystemError(f"Failed to mount shader ramdisk at {root}")

    for entry in tree.entries():
        target = Filename(f"{prefix}/{entry.path.as_posix()}")
        vfs.make_directory_full(Filename(target.get_dirname()))
        data = tree.open_file(entry.path).read_bytes()
        if not vfs.write_file(target, data, False):
            vfs.unmount(mount)
            raise FileSystemError(f"Failed to write {target} to shader ramdisk")

    logger.info("Mounted %d shaders at %s", len(tree), root)
    return mount


def mount_from_config(
    cfg: ShaderFsConfig,
    vfs: VirtualFileSystem | None = None,
) -> tuple[ShaderFileSystem, VirtualFileMountRamdisk]:
    """Build the overlay described by *cfg* and mount it at ``cfg.panda_mount_point``."""

    shaders = ShaderFileSystem(DiskFileSystem(cfg.effective_root()), cfg.shader_dir, cfg.texture_dirs)
    return shaders, mount_into_panda_vfs(shaders, cfg.panda_mount_point, vfs=vfs)


def unmount_from_panda_vfs(mount: VirtualFileMountRamdisk, vfs: VirtualFileSystem | None = None) -> None:
    vfs = vfs if vfs is not None else VirtualFileSystem.get_global_ptr()
    vfs.unmount(mount)
