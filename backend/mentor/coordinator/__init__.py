"""Mentor orchestration exports."""

from .service_coordinator import SYSTEM_ERROR_GUIDANCE, ServiceCoordinator

__all__ = ["SYSTEM_ERROR_GUIDANCE", "ServiceCoordinator"]
