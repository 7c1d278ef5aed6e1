"""
Client for the external mesh generation service.

Sends a visualization directive with fixed generation parameters and turns
the nested vertex/face arrays of the reply into a validated ``Mesh``.
Failures are returned as ``MeshFailure`` values, never raised, so the
orchestrator can apply its fallback deterministically.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from mentor.config.config_manager import ConfigManager
from mentor.models.domain import (
    InvalidMeshError,
    MalformedUpstreamResponseError,
    Mesh,
    MeshFailure,
    MeshResult,
    UpstreamUnavailableError,
)
from mentor.models.transport import MeshGenerationRequest, MeshServiceResponse

logger = logging.getLogger(__name__)

MESH_TIMEOUT_SECONDS = 15.0
API_VERSION = "2023-12-01"


class MeshClient:
    """Typed request/response wrapper around the mesh generation service."""

    def __init__(
        self,
        config_manager: ConfigManager,
        timeout: float = MESH_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config_manager = config_manager
        self.timeout = timeout
        self._transport = transport

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "X-API-Version": API_VERSION,
        }

    async def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                logger.debug(f"POST request to {url}")
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(f"Mesh service timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailableError(
                f"Mesh service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise UpstreamUnavailableError(f"Mesh service unreachable: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedUpstreamResponseError("Mesh service returned a non-JSON body") from e

    @staticmethod
    def parse_response(data: Any) -> Mesh:
        """Validate a service reply and flatten it into a ``Mesh``."""
        try:
            parsed = MeshServiceResponse.model_validate(data)
            mesh = parsed.model.mesh
            return Mesh.from_nested(mesh.vertices, mesh.faces)
        except (ValidationError, InvalidMeshError) as e:
            raise MalformedUpstreamResponseError(f"Invalid CAD response format: {e}") from e

    async def generate_mesh(self, directive: str) -> MeshResult:
        """Request a mesh for ``directive``; returns ``Mesh`` or ``MeshFailure``."""
        settings = self.config_manager.app_settings
        try:
            if not settings.zoo_cad_api_url or not settings.zoo_cad_api_key:
                raise UpstreamUnavailableError("Mesh service URL or API key is not configured")

            payload = MeshGenerationRequest(prompt=directive).model_dump()
            try:
                # httpx timeouts apply per phase; this bounds the whole round trip
                data = await asyncio.wait_for(
                    self._post(settings.zoo_cad_api_url, payload, self._headers(settings.zoo_cad_api_key)),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as e:
                raise UpstreamUnavailableError(f"Mesh service timed out after {self.timeout}s") from e
            mesh = self.parse_response(data)
            logger.info(
                f"Mesh generated: {mesh.vertex_count} vertices, {mesh.triangle_count} triangles"
            )
            return mesh
        except (UpstreamUnavailableError, MalformedUpstreamResponseError) as e:
            logger.error(f"CAD API error ({e.kind.value}): {e}", exc_info=True)
            return MeshFailure(kind=e.kind, message=str(e))
