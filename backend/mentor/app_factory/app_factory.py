"""Application factory for dependency injection and wiring."""

import logging
from typing import Optional

from mentor.catalog.mock_catalog import MockCatalog, mock_catalog
from mentor.config.config_manager import ConfigManager, config_manager
from mentor.coordinator.service_coordinator import ServiceCoordinator
from mentor.guidance.guidance_client import GuidanceClient
from mentor.logging.logging_manager import LoggingManager
from mentor.mesh.mesh_client import MeshClient
from mentor.sandbox.sandbox_manager import SandboxExecutor
from mentor.session.session_manager import SessionManager

logger = logging.getLogger(__name__)


class AppFactory:
    """Builds each component lazily and shares it for the process lifetime."""

    def __init__(self, config: Optional[ConfigManager] = None) -> None:
        self.config_manager = config or config_manager
        self.logging_manager: Optional[LoggingManager] = None
        self.catalog: Optional[MockCatalog] = None
        self.guidance_client: Optional[GuidanceClient] = None
        self.mesh_client: Optional[MeshClient] = None
        self.sandbox: Optional[SandboxExecutor] = None
        self.session_manager: Optional[SessionManager] = None
        self.service_coordinator: Optional[ServiceCoordinator] = None

    def get_config_manager(self) -> ConfigManager:
        return self.config_manager

    def get_catalog(self) -> MockCatalog:
        if self.catalog is None:
            self.catalog = mock_catalog
        return self.catalog

    def get_guidance_client(self) -> GuidanceClient:
        if self.guidance_client is None:
            self.guidance_client = GuidanceClient(self.config_manager)
        return self.guidance_client

    def get_mesh_client(self) -> MeshClient:
        if self.mesh_client is None:
            self.mesh_client = MeshClient(self.config_manager)
        return self.mesh_client

    def get_sandbox(self) -> SandboxExecutor:
        if self.sandbox is None:
            self.sandbox = SandboxExecutor()
        return self.sandbox

    def get_session_manager(self) -> SessionManager:
        if self.session_manager is None:
            self.session_manager = SessionManager()
        return self.session_manager

    def get_service_coordinator(self) -> ServiceCoordinator:
        if self.service_coordinator is None:
            self.service_coordinator = ServiceCoordinator(
                config_manager=self.config_manager,
                guidance_client=self.get_guidance_client(),
                mesh_client=self.get_mesh_client(),
                catalog=self.get_catalog(),
                sandbox=self.get_sandbox(),
            )
        return self.service_coordinator

    def setup_logging(self) -> LoggingManager:
        if self.logging_manager is None:
            self.logging_manager = LoggingManager(self.config_manager.app_settings)
        return self.logging_manager

    def initialize(self) -> None:
        """Set up logging and build every component once."""
        self.setup_logging()
        self.get_session_manager()
        self.get_service_coordinator()
        summary = self.config_manager.describe()
        logger.info(
            f"Gemini key: {'Loaded' if summary['gemini_key_loaded'] else 'MISSING!'}, "
            f"CAD mode: {summary['cad_mode']}, port: {summary['port']}"
        )
        logger.info("All components initialized.")


# Global instance used by the ASGI app
app_factory = AppFactory()
