from enum import Enum
from dataclasses import dataclass
from typing import Optional


class LLMTypes(Enum):
    OPENAI = "openai"
    GEMINI = "gemini"
    TOGETHERAI = "togetherai"


class LLMModels(Enum):
    # OpenAI models
    GPT_4O = "gpt-4o"


@dataclass
class TaskLLMConfig:
    """LLM configuration for a specific task"""
    temperature: float
    max_tokens: Optional[int]


class TaskLLMConfigs:
    """LLM configurations for different tasks"""

    # One call per reviewer persona
    REVIEWER = TaskLLMConfig(
        temperature=0.2,
        max_tokens=600
    )

    # Comparison against accepted / rejected samples
    BENCHMARK = TaskLLMConfig(
        temperature=0.2,
        max_tokens=600
    )

    # Term check: model default length, the reason is meant to be detailed
    TERM_CHECK = TaskLLMConfig(
        temperature=0.2,
        max_tokens=None
    )

    CITATIONS_BATCH = TaskLLMConfig(
        temperature=0.1,
        max_tokens=2000
    )

    # Caption parsing is purely structural
    CAPTION_FORMAT = TaskLLMConfig(
        temperature=0.0,
        max_tokens=300
    )

    REFERENCE_FORMAT = TaskLLMConfig(
        temperature=0.0,
        max_tokens=800
    )

    CITE_CHECK = TaskLLMConfig(
        temperature=0.0,
        max_tokens=300
    )
