"""
Shader overlay.

Builds a read-only tree of virtual shader files from two real inputs:
- ``*.shader`` scripts in one directory (``loader``)
- texture images found recursively in the texture directories (``linker``)

``ShaderFileSystem`` ties both together and owns the resulting tree.
"""
