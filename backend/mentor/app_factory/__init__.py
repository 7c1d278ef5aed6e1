"""Dependency wiring; the shared instance lives in ``app_factory.app_factory``."""
