"""Mentor backend: guidance, visual-aid meshes and sandboxed script execution."""

__version__ = "1.0.0"
