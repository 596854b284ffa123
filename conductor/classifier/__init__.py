"""
CONDUCTOR Classifier — Free-text task classification.

Usage:
    from conductor.classifier import TaskClassifier

    classification = TaskClassifier().classify("Review the auth module")
"""

from .task_classifier import EstimatedTokens, TaskClassification, TaskClassifier
from .taxonomy import (
    DEFAULT_TASK_TYPE,
    DOMAIN_PROFILES,
    DOMAINS_BY_NAME,
    TASK_CATEGORIES,
    TASK_TYPES,
)

__all__ = [
    "TaskClassifier",
    "TaskClassification",
    "EstimatedTokens",
    "TASK_CATEGORIES",
    "TASK_TYPES",
    "DEFAULT_TASK_TYPE",
    "DOMAIN_PROFILES",
    "DOMAINS_BY_NAME",
]
