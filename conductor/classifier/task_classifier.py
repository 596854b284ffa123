"""
Task Classifier — Maps free-text task descriptions to a classification.

Pure and deterministic: identical text always yields an identical
TaskClassification. Token and complexity estimates are heuristics and must
not be used for billing.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from .taxonomy import (
    CATEGORIES_BY_NAME,
    CRITICAL_PRIORITY_KEYWORDS,
    DEFAULT_TASK_TYPE,
    DOMAIN_CONFIDENCE_MATCHES,
    DOMAIN_PROFILES,
    HIGH_COMPLEXITY_KEYWORDS,
    HIGH_COMPLEXITY_WORD_COUNT,
    HIGH_PRIORITY_KEYWORDS,
    LOW_PRIORITY_KEYWORDS,
    MEDIUM_COMPLEXITY_KEYWORDS,
    MEDIUM_COMPLEXITY_WORD_COUNT,
    PARALLEL_KEYWORDS,
    STOP_WORDS,
    TASK_CATEGORIES,
)

_CODE_PATTERN = re.compile(r"```|<code>|function|class|const|let|var|import|export")
_PARAGRAPH_SPLIT = re.compile(r"\n\n+")

# Input tokens ~ characters / 4; output and total use fixed ratios
CHARS_PER_TOKEN = 4
OUTPUT_TOKEN_RATIO = 1.5
TOTAL_TOKEN_RATIO = 2.5


@dataclass(frozen=True)
class EstimatedTokens:
    input: int
    output: int
    total: int

    def to_dict(self) -> dict[str, int]:
        return {"input": self.input, "output": self.output, "total": self.total}


@dataclass(frozen=True)
class TaskClassification:
    """
    Derived, per-request classification of a task.

    Attributes:
        task_type: One of the fixed taxonomy values
        complexity: low | medium | high
        required_capabilities: Capability tags a worker must intersect
        priority: low | normal | high | critical
        parallelizable: Whether fanning out to diverse workers is useful
        estimated_tokens: Heuristic token budget
    """

    task_type: str
    complexity: str
    required_capabilities: frozenset[str]
    priority: str
    parallelizable: bool
    estimated_tokens: EstimatedTokens
    keywords: tuple[str, ...] = ()
    word_count: int = 0
    has_code: bool = False
    has_multiple_parts: bool = False
    domain: str | None = None
    domain_confidence: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_type": self.task_type,
            "complexity": self.complexity,
            "required_capabilities": sorted(self.required_capabilities),
            "priority": self.priority,
            "parallelizable": self.parallelizable,
            "estimated_tokens": self.estimated_tokens.to_dict(),
            "keywords": list(self.keywords),
            "word_count": self.word_count,
            "has_code": self.has_code,
            "has_multiple_parts": self.has_multiple_parts,
            "domain": self.domain,
            "domain_confidence": self.domain_confidence,
        }


@lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    # Anchor at a word start so "test" matches "tests" but not "latest"
    return re.compile(r"(?<![\w-])" + re.escape(keyword))


def _matches(text: str, keyword: str) -> bool:
    return _keyword_pattern(keyword).search(text) is not None


def _count_hits(text: str, keywords: tuple[str, ...]) -> int:
    return sum(1 for kw in dict.fromkeys(keywords) if _matches(text, kw))


def _any_hit(text: str, keywords: tuple[str, ...]) -> bool:
    return any(_matches(text, kw) for kw in keywords)


class TaskClassifier:
    """Keyword-driven task classifier."""

    def classify(self, text: str) -> TaskClassification:
        """
        Classify a task description.

        Args:
            text: Free-text task description

        Returns:
            TaskClassification (never raises for ambiguous input; ambiguous
            text falls back to the general task type)
        """
        lowered = text.lower()
        word_count = len(text.split())
        task_type = self.detect_task_type(lowered)
        domain, domain_confidence = self.detect_domain(lowered)

        return TaskClassification(
            task_type=task_type,
            complexity=self.estimate_complexity(lowered, word_count),
            required_capabilities=frozenset(CATEGORIES_BY_NAME[task_type].capabilities),
            priority=self.determine_priority(lowered),
            parallelizable=_any_hit(lowered, PARALLEL_KEYWORDS),
            estimated_tokens=self.estimate_tokens(text),
            keywords=self.extract_keywords(lowered),
            word_count=word_count,
            has_code=_CODE_PATTERN.search(text) is not None,
            has_multiple_parts=self._has_multiple_parts(text),
            domain=domain,
            domain_confidence=domain_confidence,
        )

    # ========================================================================
    # Individual Heuristics
    # ========================================================================

    def detect_task_type(self, lowered: str) -> str:
        best_type = DEFAULT_TASK_TYPE
        best_hits = 0
        for category in TASK_CATEGORIES:
            hits = _count_hits(lowered, category.keywords)
            # Strict comparison keeps the earlier category on ties
            if hits > best_hits:
                best_hits = hits
                best_type = category.name
        return best_type

    def estimate_complexity(self, lowered: str, word_count: int) -> str:
        if _any_hit(lowered, HIGH_COMPLEXITY_KEYWORDS) or word_count > HIGH_COMPLEXITY_WORD_COUNT:
            return "high"
        if (
            _any_hit(lowered, MEDIUM_COMPLEXITY_KEYWORDS)
            or word_count > MEDIUM_COMPLEXITY_WORD_COUNT
        ):
            return "medium"
        return "low"

    def determine_priority(self, lowered: str) -> str:
        if _any_hit(lowered, CRITICAL_PRIORITY_KEYWORDS):
            return "critical"
        if _any_hit(lowered, HIGH_PRIORITY_KEYWORDS):
            return "high"
        if _any_hit(lowered, LOW_PRIORITY_KEYWORDS):
            return "low"
        return "normal"

    def estimate_tokens(self, text: str) -> EstimatedTokens:
        input_tokens = math.ceil(len(text) / CHARS_PER_TOKEN)
        return EstimatedTokens(
            input=input_tokens,
            output=math.ceil(input_tokens * OUTPUT_TOKEN_RATIO),
            total=math.ceil(input_tokens * TOTAL_TOKEN_RATIO),
        )

    def extract_keywords(self, lowered: str, limit: int = 10) -> tuple[str, ...]:
        words = [w for w in lowered.split() if len(w) > 3 and w not in STOP_WORDS]
        return tuple(words[:limit])

    def detect_domain(self, lowered: str) -> tuple[str | None, float]:
        """
        Detect the development domain of a task.

        Returns:
            (domain name or None, confidence in [0, 1])
        """
        best_domain = None
        best_hits = 0
        for profile in DOMAIN_PROFILES:
            hits = _count_hits(lowered, profile.keywords)
            if hits > best_hits:
                best_hits = hits
                best_domain = profile.name

        if best_domain is None:
            return None, 0.0
        return best_domain, min(best_hits / DOMAIN_CONFIDENCE_MATCHES, 1.0)

    @staticmethod
    def _has_multiple_parts(text: str) -> bool:
        parts = _PARAGRAPH_SPLIT.split(text)
        return len(parts) > 2 or "1." in text or "a)" in text
