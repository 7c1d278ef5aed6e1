"""Service coordinator for the mentor and execution flows."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from mentor.catalog.mock_catalog import MockCatalog
from mentor.config.config_manager import ConfigManager
from mentor.guidance.guidance_client import GuidanceClient
from mentor.mesh.mesh_client import MeshClient
from mentor.models.domain import (
    ErrorKind,
    ExecutionOutcome,
    ExecutionRequest,
    MentorResponse,
    Mesh,
    MeshFailure,
    Query,
    QueryState,
    QueryTrace,
)
from mentor.sandbox.sandbox_manager import SandboxExecutor
from mentor.session.session_models import Session

logger = logging.getLogger(__name__)

SYSTEM_ERROR_GUIDANCE = "System error. Please try again later."
PIPELINE_MARGIN_SECONDS = 5.0


class ServiceCoordinator:
    """Routes client messages and runs the mentor query state machine.

    Each query goes guidance -> directive -> mesh, falling back to the mock
    catalog whenever live mesh generation is switched off or fails. Every
    query ends in ``RESPONDED`` with a populated ``MentorResponse``.
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        guidance_client: GuidanceClient,
        mesh_client: MeshClient,
        catalog: MockCatalog,
        sandbox: SandboxExecutor,
        pipeline_timeout: Optional[float] = None,
    ):
        self.config_manager = config_manager
        self.guidance_client = guidance_client
        self.mesh_client = mesh_client
        self.catalog = catalog
        self.sandbox = sandbox
        self.pipeline_timeout = pipeline_timeout or (
            guidance_client.timeout + mesh_client.timeout + PIPELINE_MARGIN_SECONDS
        )
        logger.info("ServiceCoordinator initialized")

    # ------------------------------------------------------------------
    # Mentor path
    # ------------------------------------------------------------------

    def _use_live_mesh(self) -> bool:
        return self.config_manager.app_settings.use_real_cad

    async def _resolve_mesh(self, directive: str, states: List[QueryState]) -> Tuple[Mesh, str]:
        if not self._use_live_mesh():
            states.append(QueryState.MOCK_APPLIED)
            return self.catalog.lookup(directive), "mock"

        states.append(QueryState.MESH_REQUESTED)
        result = await self.mesh_client.generate_mesh(directive)
        if isinstance(result, MeshFailure):
            logger.warning(f"Live mesh failed ({result.kind.value}), using mock catalog")
            states.extend([QueryState.MESH_FAILED, QueryState.MOCK_APPLIED])
            return self.catalog.lookup(directive), "mock"

        states.append(QueryState.MESH_READY)
        return result, "live"

    async def _run_pipeline(self, query: Query, states: List[QueryState]) -> Tuple[MentorResponse, str]:
        states.append(QueryState.GUIDANCE_REQUESTED)
        guidance = await self.guidance_client.generate_guidance(query)
        states.append(QueryState.GUIDANCE_READY)

        mesh, source = await self._resolve_mesh(guidance.visualization_directive, states)
        return MentorResponse(guidance=guidance.explanation, model=mesh), source

    async def process_query(self, query: Query, session_id: Optional[str] = None) -> QueryTrace:
        """Run one query through the pipeline. Never raises (except on cancellation)."""
        states: List[QueryState] = [QueryState.RECEIVED]
        log_extra = {"session_id": session_id}
        try:
            response, source = await asyncio.wait_for(
                self._run_pipeline(query, states), timeout=self.pipeline_timeout
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Mentor query exceeded {self.pipeline_timeout}s budget", extra=log_extra
            )
            response, source = self._system_error_response(query), "mock"
        except Exception as e:
            logger.error(f"Error handling mentor query: {e}", exc_info=True, extra=log_extra)
            response, source = self._system_error_response(query), "mock"

        states.append(QueryState.RESPONDED)
        logger.info(
            f"Mentor query answered: mesh={source}, "
            f"triangles={response.model.triangle_count}, states={[s.value for s in states]}",
            extra=log_extra,
        )
        return QueryTrace(response=response, states=states, mesh_source=source)

    def _system_error_response(self, query: Query) -> MentorResponse:
        return MentorResponse(guidance=SYSTEM_ERROR_GUIDANCE, model=self.catalog.lookup(query.text))

    async def handle_mentor_query(self, session: Session, query_text: str) -> MentorResponse:
        trace = await self.process_query(Query(text=query_text), session_id=str(session.id))
        await session.emit(trace.response.to_message())
        return trace.response

    # ------------------------------------------------------------------
    # Execution path
    # ------------------------------------------------------------------

    async def run_code(self, code: str, session_id: Optional[str] = None) -> str:
        """Execute ``code`` and return the string shown to the client."""
        try:
            outcome = await self.sandbox.execute(ExecutionRequest(source=code))
        except Exception as e:
            logger.error(f"Error executing code: {e}", exc_info=True, extra={"session_id": session_id})
            outcome = ExecutionOutcome.failure(ErrorKind.UNEXPECTED_INTERNAL_ERROR, str(e))
        if not outcome.ok:
            logger.info(
                f"Execution failed: {outcome.error_kind.value}",
                extra={"session_id": session_id, "error_kind": outcome.error_kind.value},
            )
        return outcome.display_text()

    async def handle_execute_code(self, session: Session, code: str) -> str:
        result = await self.run_code(code, session_id=str(session.id))
        await session.emit({"type": "execution_result", "result": result})
        return result

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, session: Session, data: Any) -> Optional["asyncio.Task[Any]"]:
        """Start handling one client message; returns the spawned task, if any.

        Requests run as independent tasks so a slow query never holds up the
        receive loop; responses go out in completion order.
        """
        if not isinstance(data, dict):
            await session.emit({"type": "error", "message": "Invalid message"})
            return None

        message_type = data.get("type")
        if message_type == "mentor_query":
            return session.spawn(self.handle_mentor_query(session, _text_field(data, "query")))
        if message_type == "execute_code":
            return session.spawn(self.handle_execute_code(session, _text_field(data, "code")))

        logger.warning(f"Unknown message type: {message_type}", extra={"session_id": str(session.id)})
        await session.emit({"type": "error", "message": f"Unknown message type: {message_type}"})
        return None


def _text_field(data: Dict[str, Any], key: str) -> str:
    value = data.get(key, "")
    return value if isinstance(value, str) else ""
