import logging
from typing import Optional

from paperpilot.llm.base import LLMClient
from paperpilot.llm.constants import TaskLLMConfigs
from paperpilot.parsing.extract import extract_json
from paperpilot.prompts.builder import build_benchmark_prompt
from paperpilot.schemas import ComparativeBenchmark, ReviewTask

logger = logging.getLogger(__name__)


def benchmark(task: ReviewTask, llm: LLMClient, sample_chars: int = 400) -> Optional[ComparativeBenchmark]:
    """Score the submission against accepted/rejected samples.

    Returns None when the task carries no samples or the model output cannot
    be parsed. Completion failures propagate; the orchestrator treats this
    stage as best effort.
    """
    if not task.has_samples:
        return None
    prompt = build_benchmark_prompt(task, sample_chars)
    config = TaskLLMConfigs.BENCHMARK
    response = llm.generate(prompt.user, system=prompt.system,
                            temperature=config.temperature, max_tokens=config.max_tokens)
    result = ComparativeBenchmark.from_payload(extract_json(response, None))
    if result is None:
        logger.warning("Benchmark output was not a JSON object, omitting it")
    return result
