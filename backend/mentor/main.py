"""
Mentor backend ASGI application.

One websocket per client at ``/ws``. ``mentor_query`` and ``execute_code``
messages are handled concurrently per connection; results come back as
``mentor_response`` and ``execution_result`` messages.
"""

import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware

from mentor import __version__
from mentor.app_factory.app_factory import AppFactory, app_factory

logger = logging.getLogger(__name__)


def create_app(factory: AppFactory) -> FastAPI:
    """Build the FastAPI app around an application factory."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        factory.initialize()
        logger.info("Starting Mentor Backend")
        yield
        logger.info("Shutting down Mentor Backend")

    settings = factory.get_config_manager().app_settings
    app = FastAPI(
        title="Mentor Backend",
        description="Guidance, visual-aid meshes and sandboxed execution over websocket",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "cad_mode": factory.get_config_manager().app_settings.cad_mode,
        }

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        allowed_origin = factory.get_config_manager().app_settings.client_url
        origin = websocket.headers.get("origin")
        if origin and origin.rstrip("/") != allowed_origin.rstrip("/"):
            logger.warning(f"Rejected websocket from origin {origin}")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        await websocket.accept()
        session_manager = factory.get_session_manager()
        coordinator = factory.get_service_coordinator()
        client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else None
        session = session_manager.create_session(sender=websocket.send_json, client=client)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))
                try:
                    data = json.loads(_frame_text(message))
                except (ValueError, TypeError, RecursionError):
                    logger.warning(
                        "Received non-JSON frame", extra={"session_id": str(session.id)}
                    )
                    data = None
                await coordinator.dispatch(session, data)
        except WebSocketDisconnect:
            pass
        finally:
            await session_manager.end_session(session.id)

    return app


def _frame_text(message: dict):
    """Text of a websocket frame; binary frames are read as UTF-8 JSON."""
    if message.get("text") is not None:
        return message["text"]
    if message.get("bytes") is not None:
        return message["bytes"].decode("utf-8")
    return None


app = create_app(app_factory)


def run() -> None:
    """Serve the app on the configured port."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app_factory.get_config_manager().app_settings.port)


if __name__ == "__main__":
    run()
