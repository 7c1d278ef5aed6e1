"""Domain models for the mentor pipeline and the execution engine."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union


class ErrorKind(Enum):
    """Classification of every failure the pipeline can observe."""

    UPSTREAM_UNAVAILABLE = "UpstreamUnavailable"
    MALFORMED_UPSTREAM_RESPONSE = "MalformedUpstreamResponse"
    RESTRICTED_OPERATION = "RestrictedOperation"
    TIMEOUT = "Timeout"
    RUNTIME_ERROR = "RuntimeError"
    UNEXPECTED_INTERNAL_ERROR = "UnexpectedInternalError"


class MentorError(Exception):
    """Base exception carrying an ErrorKind."""

    kind = ErrorKind.UNEXPECTED_INTERNAL_ERROR


class UpstreamUnavailableError(MentorError):
    """Raised when a backend is unreachable, returns non-2xx or times out."""

    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class MalformedUpstreamResponseError(MentorError):
    """Raised when a backend answers with a payload that fails validation."""

    kind = ErrorKind.MALFORMED_UPSTREAM_RESPONSE


class InvalidMeshError(ValueError):
    """Raised when vertex/index buffers violate the mesh invariants."""


class QueryState(Enum):
    """States a mentor query moves through."""

    RECEIVED = "received"
    GUIDANCE_REQUESTED = "guidance_requested"
    GUIDANCE_READY = "guidance_ready"
    MESH_REQUESTED = "mesh_requested"
    MESH_READY = "mesh_ready"
    MESH_FAILED = "mesh_failed"
    MOCK_APPLIED = "mock_applied"
    RESPONDED = "responded"


@dataclass(frozen=True)
class Query:
    """A single natural-language question."""

    text: str


@dataclass(frozen=True)
class Mesh:
    """Triangle mesh stored as flat stride-3 buffers.

    ``vertices`` holds x, y, z triples and ``indices`` holds one vertex
    index triple per triangle. Construction validates both buffers, so any
    ``Mesh`` instance is safe to hand to the renderer.
    """

    vertices: tuple
    indices: tuple

    def __post_init__(self):
        try:
            vertices = tuple(float(v) for v in self.vertices)
        except (TypeError, ValueError) as e:
            raise InvalidMeshError(f"Vertex buffer is not numeric: {e}") from e
        if not all(math.isfinite(v) for v in vertices):
            raise InvalidMeshError("Vertex buffer contains NaN or infinite components")
        indices = tuple(self.indices)

        if len(vertices) % 3 != 0:
            raise InvalidMeshError(
                f"Vertex buffer length {len(vertices)} is not a multiple of 3"
            )
        if len(indices) % 3 != 0:
            raise InvalidMeshError(
                f"Index buffer length {len(indices)} is not a multiple of 3"
            )

        vertex_count = len(vertices) // 3
        for index in indices:
            # bool is an int subclass but never a valid index
            if isinstance(index, bool) or not isinstance(index, int):
                raise InvalidMeshError(f"Index {index!r} is not an integer")
            if index < 0 or index >= vertex_count:
                raise InvalidMeshError(
                    f"Index {index} out of range for {vertex_count} vertices"
                )

        object.__setattr__(self, "vertices", vertices)
        object.__setattr__(self, "indices", indices)

    @classmethod
    def from_nested(
        cls, points: Sequence[Sequence[float]], faces: Sequence[Sequence[int]]
    ) -> "Mesh":
        """Build a mesh from ``[[x, y, z], ...]`` and ``[[i, j, k], ...]``."""
        for point in points:
            if len(point) != 3:
                raise InvalidMeshError(f"Vertex {point!r} does not have 3 components")
        for face in faces:
            if len(face) != 3:
                raise InvalidMeshError(f"Face {face!r} is not a triangle")
        return cls(
            vertices=tuple(c for point in points for c in point),
            indices=tuple(i for face in faces for i in face),
        )

    @property
    def vertex_count(self) -> int:
        return len(self.vertices) // 3

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def to_dict(self) -> Dict[str, List[Any]]:
        """Convert to the client wire format."""
        return {"vertices": list(self.vertices), "indices": list(self.indices)}


@dataclass(frozen=True)
class MeshFailure:
    """Typed failure returned by the mesh client instead of raising."""

    kind: ErrorKind
    message: str


MeshResult = Union[Mesh, MeshFailure]


@dataclass(frozen=True)
class GuidanceResult:
    """Explanation text plus the directive used to drive mesh generation."""

    explanation: str
    visualization_directive: str


@dataclass(frozen=True)
class MentorResponse:
    """The single consolidated answer to a mentor query."""

    guidance: str
    model: Mesh

    def to_message(self) -> Dict[str, Any]:
        return {
            "type": "mentor_response",
            "guidance": self.guidance,
            "modelData": self.model.to_dict(),
        }


@dataclass
class QueryTrace:
    """Response of a query together with the path it took."""

    response: MentorResponse
    states: List[QueryState] = field(default_factory=list)
    mesh_source: str = "mock"


@dataclass(frozen=True)
class ExecutionRequest:
    """Source text submitted for sandboxed execution."""

    source: str


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of one sandboxed run.

    On success ``value`` holds the rendered text of the script's final value;
    on failure ``error_kind`` and ``message`` describe what went wrong.
    """

    value: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, value: str) -> "ExecutionOutcome":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ExecutionOutcome":
        return cls(error_kind=kind, message=message)

    def display_text(self) -> str:
        """Render the outcome as the string shown in the execution pane."""
        if self.ok:
            return self.value if self.value is not None else ""
        return f"Execution Error: {self.message}"
