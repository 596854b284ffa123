"""
CONDUCTOR Feedback — Outcome history and learned scores.

Usage:
    from conductor.feedback import FeedbackStore

    store = FeedbackStore(persistence)
    await store.record(worker_id, task_type, outcome)
    prediction = store.predict(task_type)
"""

from .models import AgentStats, FeedbackEntry, OutcomeStats, RunningStat, TaskTypeStats
from .store import FeedbackStore, Prediction

__all__ = [
    "FeedbackStore",
    "Prediction",
    "FeedbackEntry",
    "RunningStat",
    "OutcomeStats",
    "AgentStats",
    "TaskTypeStats",
]
