"""Tests for the mesh generation client."""

import asyncio
import json

import httpx
import pytest

from mentor.mesh.mesh_client import MeshClient
from mentor.models.domain import ErrorKind, Mesh, MeshFailure

VALID_BODY = {
    "model": {
        "mesh": {
            "vertices": [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
            "faces": [[0, 1, 2], [0, 2, 3]],
        }
    }
}


def client_with(handler, config, timeout=15.0):
    return MeshClient(config, timeout=timeout, transport=httpx.MockTransport(handler))


def responding(status_code=200, **kwargs):
    return lambda request: httpx.Response(status_code, **kwargs)


@pytest.mark.asyncio
async def test_request_shape_and_flattened_mesh(live_config):
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["headers"] = request.headers
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=VALID_BODY)

    result = await client_with(handler, live_config).generate_mesh("cutaway camera")

    assert isinstance(result, Mesh)
    assert result.vertices == (0, 0, 0, 1, 0, 0, 1, 1, 0, 0, 1, 0)
    assert result.indices == (0, 1, 2, 0, 2, 3)
    assert captured["url"] == "https://cad.example.test/v1/generate"
    assert captured["headers"]["authorization"] == "Bearer test-cad-key"
    assert captured["headers"]["x-api-version"] == "2023-12-01"
    assert captured["body"] == {
        "prompt": "cutaway camera",
        "parameters": {"resolution": "high", "format": "vertices-indices", "units": "mm"},
    }


@pytest.mark.asyncio
async def test_vertices_without_faces_is_an_empty_shape_not_a_failure(live_config):
    body = {"model": {"mesh": {"vertices": [[0, 0, 0]], "faces": []}}}
    result = await client_with(responding(json=body), live_config).generate_mesh("dot")

    assert isinstance(result, Mesh)
    assert result.triangle_count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"model": {}},
        {"model": {"mesh": {"faces": [[0, 1, 2]]}}},
        {"model": {"mesh": {"vertices": [], "faces": []}}},
        {"model": {"mesh": {"vertices": [[0, 0, 0]]}}},
        {"model": {"mesh": {"vertices": [[0, 0, 0], [1, 1, 1]], "faces": [[0, 1, 5]]}}},
        {"model": {"mesh": {"vertices": [[0, 0]], "faces": []}}},
        [1, 2, 3],
    ],
)
async def test_malformed_bodies_are_failures(live_config, body):
    result = await client_with(responding(json=body), live_config).generate_mesh("x")

    assert isinstance(result, MeshFailure)
    assert result.kind is ErrorKind.MALFORMED_UPSTREAM_RESPONSE


@pytest.mark.asyncio
async def test_non_json_body_is_malformed(live_config):
    result = await client_with(responding(text="<html>oops</html>"), live_config).generate_mesh("x")

    assert isinstance(result, MeshFailure)
    assert result.kind is ErrorKind.MALFORMED_UPSTREAM_RESPONSE


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 404, 500, 503])
async def test_error_status_is_upstream_unavailable(live_config, status_code):
    result = await client_with(
        responding(status_code, json={"error": "nope"}), live_config
    ).generate_mesh("x")

    assert isinstance(result, MeshFailure)
    assert result.kind is ErrorKind.UPSTREAM_UNAVAILABLE
    assert str(status_code) in result.message


@pytest.mark.asyncio
async def test_connection_error_is_upstream_unavailable(live_config):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    result = await client_with(handler, live_config).generate_mesh("x")

    assert isinstance(result, MeshFailure)
    assert result.kind is ErrorKind.UPSTREAM_UNAVAILABLE


@pytest.mark.asyncio
async def test_slow_service_hits_hard_timeout(live_config):
    async def handler(request):
        await asyncio.sleep(5)
        return httpx.Response(200, json=VALID_BODY)

    result = await asyncio.wait_for(
        client_with(handler, live_config, timeout=0.1).generate_mesh("x"), timeout=2
    )

    assert isinstance(result, MeshFailure)
    assert result.kind is ErrorKind.UPSTREAM_UNAVAILABLE


@pytest.mark.asyncio
async def test_missing_configuration_skips_the_network(config_factory):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=VALID_BODY)

    config = config_factory(use_real_cad=True, zoo_cad_api_url="")
    result = await client_with(handler, config).generate_mesh("x")

    assert isinstance(result, MeshFailure)
    assert result.kind is ErrorKind.UPSTREAM_UNAVAILABLE
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("component", ["NaN", "Infinity", "-Infinity"])
async def test_non_finite_vertices_are_malformed(live_config, component):
    body = (
        '{"model": {"mesh": {"vertices": [[0, 0, 0], [1, 0, 0], [%s, 1, 0]], '
        '"faces": [[0, 1, 2]]}}}' % component
    )
    result = await client_with(
        responding(content=body.encode(), headers={"content-type": "application/json"}),
        live_config,
    ).generate_mesh("x")

    assert isinstance(result, MeshFailure)
    assert result.kind is ErrorKind.MALFORMED_UPSTREAM_RESPONSE
