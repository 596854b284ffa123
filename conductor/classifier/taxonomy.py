"""
Task Taxonomy — Keyword tables driving task classification.

Declaration order matters: when two categories score the same number of
keyword hits, the one declared first wins.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TASK_TYPE = "general-tasks"


@dataclass(frozen=True)
class TaskCategory:
    """One task type with its trigger keywords and required capabilities."""

    name: str
    keywords: tuple[str, ...]
    capabilities: tuple[str, ...]


# ============================================================================
# Task Categories
# ============================================================================

TASK_CATEGORIES: tuple[TaskCategory, ...] = (
    TaskCategory(
        "code-generation",
        ("generate", "create", "write", "implement", "build", "code"),
        ("code-generation",),
    ),
    TaskCategory(
        "code-review",
        ("review", "analyze", "check", "audit", "examine", "quality"),
        ("code-review",),
    ),
    TaskCategory(
        "refactoring",
        ("refactor", "improve", "optimize", "clean", "restructure"),
        ("refactoring",),
    ),
    TaskCategory(
        "system-design",
        ("design", "architecture", "structure", "plan", "blueprint"),
        ("system-design", "architecture"),
    ),
    TaskCategory(
        "documentation",
        ("document", "explain", "describe", "guide", "tutorial"),
        ("documentation",),
    ),
    TaskCategory(
        "testing",
        ("test", "unit test", "integration test", "e2e", "coverage"),
        ("testing",),
    ),
    TaskCategory(
        "analysis",
        ("analyze", "examine", "investigate", "research"),
        ("analysis",),
    ),
    TaskCategory(
        "data-analysis",
        ("data", "statistics", "metrics", "analytics", "insights"),
        ("data-analysis",),
    ),
    TaskCategory(
        "research",
        ("research", "investigate", "explore", "study", "learn"),
        ("research",),
    ),
    TaskCategory(
        "complex-reasoning",
        ("complex", "solve", "problem", "algorithm", "logic"),
        ("complex-reasoning",),
    ),
    TaskCategory(
        DEFAULT_TASK_TYPE,
        ("help", "assist", "support", "general", "misc"),
        (DEFAULT_TASK_TYPE,),
    ),
)

TASK_TYPES: tuple[str, ...] = tuple(c.name for c in TASK_CATEGORIES)
CATEGORIES_BY_NAME: dict[str, TaskCategory] = {c.name: c for c in TASK_CATEGORIES}


# ============================================================================
# Complexity / Priority / Parallelism Keywords
# ============================================================================

HIGH_COMPLEXITY_KEYWORDS: tuple[str, ...] = (
    "complex", "advanced", "sophisticated", "intricate",
    "architecture", "design pattern", "algorithm", "optimization",
)
MEDIUM_COMPLEXITY_KEYWORDS: tuple[str, ...] = (
    "refactor", "improve", "enhance", "integrate", "multiple",
)

HIGH_COMPLEXITY_WORD_COUNT = 500
MEDIUM_COMPLEXITY_WORD_COUNT = 200

CRITICAL_PRIORITY_KEYWORDS: tuple[str, ...] = (
    "urgent", "asap", "critical", "emergency", "immediately",
)
HIGH_PRIORITY_KEYWORDS: tuple[str, ...] = ("important", "high", "priority", "soon")
LOW_PRIORITY_KEYWORDS: tuple[str, ...] = ("low", "when possible", "eventually", "someday")

PARALLEL_KEYWORDS: tuple[str, ...] = (
    "multiple", "several", "different", "various", "both", "and",
    "compare", "analyze", "review", "check",
)

STOP_WORDS: frozenset[str] = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "is", "are", "was", "were", "be", "been",
})


# ============================================================================
# Domain Profiles
# ============================================================================


@dataclass(frozen=True)
class DomainProfile:
    """Development domain with its trigger keywords and preferred strategy."""

    name: str
    title: str
    keywords: tuple[str, ...]
    routing_strategy: str


DOMAIN_PROFILES: tuple[DomainProfile, ...] = (
    DomainProfile(
        "frontend",
        "Frontend Development",
        ("react", "vue", "angular", "css", "html", "javascript", "typescript",
         "ui", "ux", "component", "styling"),
        "best-match",
    ),
    DomainProfile(
        "backend",
        "Backend Development",
        ("node", "python", "api", "database", "express", "django", "flask", "sql",
         "rest", "graphql", "authentication", "middleware"),
        "best-match",
    ),
    DomainProfile(
        "data-science",
        "Data Science & ML",
        ("machine learning", "ml", "data science", "pandas", "numpy", "scikit-learn",
         "tensorflow", "pytorch", "statistics", "visualization", "model"),
        "parallel-diverse",
    ),
    DomainProfile(
        "devops",
        "DevOps & Infrastructure",
        ("docker", "kubernetes", "ci/cd", "terraform", "aws", "gcp", "azure",
         "monitoring", "logging", "deployment", "infrastructure"),
        "best-match",
    ),
    DomainProfile(
        "mobile",
        "Mobile Development",
        ("react-native", "flutter", "swift", "kotlin", "mobile", "ios", "android"),
        "best-match",
    ),
    DomainProfile(
        "testing",
        "Testing & QA",
        ("jest", "pytest", "mocha", "testing", "unit test", "integration test",
         "e2e", "qa", "coverage"),
        "best-match",
    ),
)

DOMAINS_BY_NAME: dict[str, DomainProfile] = {d.name: d for d in DOMAIN_PROFILES}

# Three keyword matches count as full confidence
DOMAIN_CONFIDENCE_MATCHES = 3
