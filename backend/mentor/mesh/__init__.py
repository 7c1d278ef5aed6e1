"""Mesh generation client exports."""

from .mesh_client import API_VERSION, MESH_TIMEOUT_SECONDS, MeshClient

__all__ = ["API_VERSION", "MESH_TIMEOUT_SECONDS", "MeshClient"]
