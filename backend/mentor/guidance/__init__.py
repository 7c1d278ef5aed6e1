"""Guidance generation exports."""

from .guidance_client import GUIDANCE_TIMEOUT_SECONDS, GuidanceClient, extract_directive

__all__ = ["GUIDANCE_TIMEOUT_SECONDS", "GuidanceClient", "extract_directive"]
