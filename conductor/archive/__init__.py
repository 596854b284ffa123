"""
CONDUCTOR Archive — Execution history.
"""

from .execution_log import ExecutionLog, ExecutionRecord

__all__ = ["ExecutionLog", "ExecutionRecord"]
