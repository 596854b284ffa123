"""
CONDUCTOR Core — Orchestration.
"""

from .orchestrator import Orchestrator, OrchestratorConfig

__all__ = ["Orchestrator", "OrchestratorConfig"]
