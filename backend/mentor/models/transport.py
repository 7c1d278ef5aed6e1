"""Wire-level schemas for the mesh generation service."""

from typing import List

from pydantic import BaseModel, Field, field_validator


class MeshPayload(BaseModel):
    """The ``mesh`` object inside a generation response."""

    vertices: List[List[float]]
    faces: List[List[int]]

    @field_validator("vertices")
    @classmethod
    def vertices_not_empty(cls, v: List[List[float]]) -> List[List[float]]:
        if not v:
            raise ValueError("mesh vertices must not be empty")
        return v


class MeshModelPayload(BaseModel):
    mesh: MeshPayload


class MeshServiceResponse(BaseModel):
    """Top-level body returned by the mesh generation service."""

    model: MeshModelPayload


class MeshGenerationParameters(BaseModel):
    resolution: str = "high"
    format: str = "vertices-indices"
    units: str = "mm"


class MeshGenerationRequest(BaseModel):
    """Request body sent to the mesh generation service."""

    prompt: str
    parameters: MeshGenerationParameters = Field(
        default_factory=MeshGenerationParameters
    )
