"""Mock mesh catalog exports."""

from .mock_catalog import DEFAULT_QUAD, MockCatalog, build_mesh

__all__ = ["DEFAULT_QUAD", "MockCatalog", "build_mesh"]
