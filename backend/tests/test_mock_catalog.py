"""Tests for the mock mesh catalog."""

import pytest

from mentor.catalog.mock_catalog import DEFAULT_QUAD, MockCatalog, build_mesh
from mentor.models.domain import Mesh


@pytest.fixture
def catalog():
    return MockCatalog()


def assert_valid(mesh: Mesh):
    assert len(mesh.indices) % 3 == 0
    assert all(0 <= i < len(mesh.vertices) / 3 for i in mesh.indices)


class TestLookup:
    @pytest.mark.parametrize("text", ["camera", "A CAMERA with a zoom lens", "Pinhole Camera obscura"])
    def test_camera_keyword_any_case(self, catalog, text):
        mesh = catalog.lookup(text)
        assert mesh is catalog.lookup("camera")
        assert mesh is not DEFAULT_QUAD
        assert mesh.triangle_count > 0

    def test_transistor_keyword(self, catalog):
        mesh = catalog.lookup("3D model of an NPN Transistor with leads")
        assert mesh is catalog.lookup("transistor")
        assert mesh is not catalog.lookup("camera")

    def test_unmatched_returns_default_quad(self, catalog):
        mesh = catalog.lookup("a bicycle gear train")
        assert mesh is DEFAULT_QUAD
        assert mesh.vertex_count == 4
        assert mesh.triangle_count == 2

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_input_returns_default_quad(self, catalog, text):
        assert catalog.lookup(text) is DEFAULT_QUAD

    def test_first_keyword_in_catalog_order_wins(self, catalog):
        assert catalog.lookup("transistor inside a camera") is catalog.lookup("camera")


def test_every_catalog_mesh_is_valid(catalog):
    for keyword in catalog.keywords:
        assert_valid(catalog.lookup(keyword))
    assert_valid(DEFAULT_QUAD)


def test_custom_entries_are_matched_case_insensitively():
    cube = build_mesh([((0, 0, 0), (1, 1, 1))])
    catalog = MockCatalog(entries=[("Cube", cube)])

    assert catalog.lookup("a small CUBE") is cube
    assert catalog.keywords == ["cube"]


def test_build_mesh_offsets_indices_per_box():
    mesh = build_mesh([((0, 0, 0), (1, 1, 1)), ((2, 0, 0), (1, 1, 1))])

    assert mesh.vertex_count == 16
    assert mesh.triangle_count == 24
    assert max(mesh.indices) == 15
