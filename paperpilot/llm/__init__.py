from .base import (
    LLMClient,
    CompletionFailure,
    CompletionTimeout,
    CompletionRateLimited,
    CompletionError,
)
from .constants import LLMTypes, LLMModels, TaskLLMConfig, TaskLLMConfigs
from .config import load_api_key

__all__ = [
    'LLMClient', 'CompletionFailure', 'CompletionTimeout', 'CompletionRateLimited',
    'CompletionError', 'LLMTypes', 'LLMModels', 'TaskLLMConfig', 'TaskLLMConfigs',
    'load_api_key',
]
