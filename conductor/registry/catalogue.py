"""
Worker Catalogue — Built-in worker definitions.

Static seed for the registry. Dynamic workers can be added at runtime or
loaded from the persistence store on top of this catalogue.
"""

from __future__ import annotations

from .models import ReliabilityTier, SpeedTier, Worker

# ============================================================================
# Default Worker Matrix
# ============================================================================

DEFAULT_WORKERS: list[dict] = [
    # Anthropic
    {
        "id": "claude-3-opus",
        "provider_family": "anthropic",
        "name": "Claude 3 Opus",
        "capabilities": [
            "complex-reasoning", "code-review", "system-design", "architecture",
            "documentation", "analysis", "planning",
        ],
        "max_payload_tokens": 200000,
        "cost_per_k_tokens": 0.015,
        "speed_tier": SpeedTier.MEDIUM,
        "reliability_tier": ReliabilityTier.VERY_HIGH,
        "description": "Most capable Claude model for complex reasoning and analysis",
    },
    {
        "id": "claude-3-sonnet",
        "provider_family": "anthropic",
        "name": "Claude 3 Sonnet",
        "capabilities": [
            "code-generation", "code-review", "refactoring", "documentation",
            "analysis", "general-tasks",
        ],
        "max_payload_tokens": 200000,
        "cost_per_k_tokens": 0.003,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.HIGH,
        "description": "Balanced Claude model for general tasks",
    },
    # OpenAI
    {
        "id": "gpt-4-turbo",
        "provider_family": "openai",
        "name": "GPT-4 Turbo",
        "capabilities": [
            "code-generation", "code-review", "complex-reasoning", "analysis",
            "documentation", "creative-tasks", "general-tasks",
        ],
        "max_payload_tokens": 128000,
        "cost_per_k_tokens": 0.01,
        "speed_tier": SpeedTier.MEDIUM,
        "reliability_tier": ReliabilityTier.HIGH,
        "description": "GPT-4 model with extended context",
    },
    {
        "id": "gpt-4o",
        "provider_family": "openai",
        "name": "GPT-4o",
        "capabilities": [
            "code-generation", "multimodal", "analysis", "general-tasks",
            "image-understanding",
        ],
        "max_payload_tokens": 128000,
        "cost_per_k_tokens": 0.005,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.HIGH,
        "description": "Optimized GPT-4 model with multimodal support",
    },
    # Google
    {
        "id": "gemini-pro",
        "provider_family": "google",
        "name": "Gemini Pro",
        "capabilities": [
            "code-generation", "analysis", "research", "data-analysis", "general-tasks",
        ],
        "max_payload_tokens": 32000,
        "cost_per_k_tokens": 0.0005,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.MEDIUM_HIGH,
        "description": "Gemini model for general tasks",
    },
    {
        "id": "gemini-pro-vision",
        "provider_family": "google",
        "name": "Gemini Pro Vision",
        "capabilities": ["multimodal", "image-understanding", "analysis", "research"],
        "max_payload_tokens": 32000,
        "cost_per_k_tokens": 0.0005,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.MEDIUM_HIGH,
        "description": "Gemini with vision capabilities",
    },
    # GitHub Copilot family
    {
        "id": "copilot-gpt4",
        "provider_family": "github-copilot",
        "name": "GitHub Copilot (GPT-4)",
        "capabilities": [
            "code-generation", "code-completion", "refactoring", "testing", "documentation",
        ],
        "max_payload_tokens": 8000,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.VERY_FAST,
        "reliability_tier": ReliabilityTier.HIGH,
        "description": "Copilot powered by GPT-4",
    },
    {
        "id": "copilot-gpt4-turbo",
        "provider_family": "github-copilot",
        "name": "GitHub Copilot (GPT-4 Turbo)",
        "capabilities": [
            "code-generation", "code-completion", "refactoring", "testing",
            "documentation", "complex-reasoning",
        ],
        "max_payload_tokens": 16000,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.VERY_HIGH,
        "description": "Copilot powered by GPT-4 Turbo with extended context",
    },
    {
        "id": "copilot-gpt35-turbo",
        "provider_family": "github-copilot",
        "name": "GitHub Copilot (GPT-3.5 Turbo)",
        "capabilities": ["code-generation", "code-completion", "refactoring", "testing"],
        "max_payload_tokens": 4000,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.VERY_FAST,
        "reliability_tier": ReliabilityTier.HIGH,
        "description": "Lightweight, low-latency Copilot model",
    },
    {
        "id": "copilot-claude",
        "provider_family": "github-copilot",
        "name": "GitHub Copilot (Claude)",
        "capabilities": [
            "code-generation", "code-review", "refactoring", "documentation",
            "complex-reasoning", "analysis",
        ],
        "max_payload_tokens": 8000,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.VERY_HIGH,
        "description": "Copilot powered by Claude for reasoning and code review",
    },
    {
        "id": "copilot-code-search",
        "provider_family": "github-copilot",
        "name": "GitHub Copilot (Code Search)",
        "capabilities": ["code-search", "analysis", "research", "code-understanding"],
        "max_payload_tokens": 4000,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.VERY_FAST,
        "reliability_tier": ReliabilityTier.HIGH,
        "description": "Code search and repository understanding",
    },
    {
        "id": "copilot-chat",
        "provider_family": "github-copilot",
        "name": "GitHub Copilot (Chat)",
        "capabilities": [
            "code-generation", "code-review", "documentation", "general-tasks", "explanation",
        ],
        "max_payload_tokens": 8000,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.HIGH,
        "description": "Conversational code assistance",
    },
    {
        "id": "copilot-enterprise",
        "provider_family": "github-copilot",
        "name": "GitHub Copilot (Enterprise)",
        "capabilities": [
            "code-generation", "code-review", "refactoring", "testing", "documentation",
            "security-analysis", "complex-reasoning",
        ],
        "max_payload_tokens": 16000,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.VERY_HIGH,
        "description": "Copilot with security scanning and extended context",
    },
    # OpenCodeZen
    {
        "id": "opencodezen-pro",
        "provider_family": "opencodezen",
        "name": "OpenCodeZen Pro",
        "capabilities": [
            "code-generation", "code-review", "optimization", "refactoring",
            "testing", "documentation",
        ],
        "max_payload_tokens": 16000,
        "cost_per_k_tokens": 0.001,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.HIGH,
        "description": "Code generation and optimization",
    },
    # Local Ollama models
    {
        "id": "ollama-llama2",
        "provider_family": "ollama",
        "name": "Llama 2 (Local)",
        "capabilities": ["code-generation", "general-tasks", "analysis"],
        "max_payload_tokens": 4096,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.MEDIUM,
        "reliability_tier": ReliabilityTier.MEDIUM,
        "is_local": True,
        "description": "Llama 2 running locally",
    },
    {
        "id": "ollama-mistral",
        "provider_family": "ollama",
        "name": "Mistral (Local)",
        "capabilities": ["code-generation", "general-tasks", "analysis", "reasoning"],
        "max_payload_tokens": 8192,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.MEDIUM,
        "reliability_tier": ReliabilityTier.MEDIUM_HIGH,
        "is_local": True,
        "description": "Mistral running locally",
    },
    {
        "id": "ollama-neural-chat",
        "provider_family": "ollama",
        "name": "Neural Chat (Local)",
        "capabilities": ["code-generation", "general-tasks", "conversation"],
        "max_payload_tokens": 4096,
        "cost_per_k_tokens": 0.0,
        "speed_tier": SpeedTier.FAST,
        "reliability_tier": ReliabilityTier.MEDIUM,
        "is_local": True,
        "description": "Neural Chat running locally",
    },
]


def default_catalogue() -> list[Worker]:
    """Build Worker records for the built-in catalogue, in declaration order."""
    return [Worker(**entry) for entry in DEFAULT_WORKERS]
