"""Models package.

Structure:
- domain: pipeline entities, error taxonomy and query states
- transport: wire schemas for the mesh generation service
"""

from .domain import (
    ErrorKind,
    ExecutionOutcome,
    ExecutionRequest,
    GuidanceResult,
    InvalidMeshError,
    MalformedUpstreamResponseError,
    MentorError,
    MentorResponse,
    Mesh,
    MeshFailure,
    MeshResult,
    Query,
    QueryState,
    QueryTrace,
    UpstreamUnavailableError,
)

__all__ = [
    "ErrorKind",
    "ExecutionOutcome",
    "ExecutionRequest",
    "GuidanceResult",
    "InvalidMeshError",
    "MalformedUpstreamResponseError",
    "MentorError",
    "MentorResponse",
    "Mesh",
    "MeshFailure",
    "MeshResult",
    "Query",
    "QueryState",
    "QueryTrace",
    "UpstreamUnavailableError",
]
