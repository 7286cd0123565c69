import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from paperpilot.agents.base import Agent
from paperpilot.agents.benchmark import benchmark
from paperpilot.agents.leader import merge_verdicts
from paperpilot.agents.reviewer_experimentalist import ReviewerExperimentalist
from paperpilot.agents.reviewer_impact import ReviewerImpact
from paperpilot.agents.reviewer_theorist import ReviewerTheorist
from paperpilot.config import Config
from paperpilot.errors import UpstreamTimeout, from_completion_failure
from paperpilot.llm.base import CompletionFailure, LLMClient, classify_failure
from paperpilot.prompts.roles import ReviewerRole
from paperpilot.schemas import ComparativeBenchmark, ReviewOutcome, ReviewTask, ReviewerVerdict

logger = logging.getLogger(__name__)

REVIEWER_CLASSES = [ReviewerTheorist, ReviewerExperimentalist, ReviewerImpact]

REVIEW_TIMEOUT_MESSAGE = "Request timeout. Paper review takes 1-2 minutes."


@dataclass
class ReviewerResult:
    role: ReviewerRole
    verdict: ReviewerVerdict
    failure: Optional[CompletionFailure] = None


def run_reviewer_task(agent: Agent, task: ReviewTask) -> ReviewerResult:
    """Run a single reviewer; any failure degrades to the default verdict."""
    try:
        verdict = agent.review(task)
    except Exception as e:
        failure = classify_failure(e)
        logger.warning("Error in %s reviewer, using default verdict: %s", agent.name, failure)
        return ReviewerResult(agent.role, ReviewerVerdict(), failure)
    logger.info("Completed %s reviewer (score %s, %d weaknesses)",
                agent.name, verdict.score, len(verdict.weaknesses))
    return ReviewerResult(agent.role, verdict)


def run_benchmark_task(task: ReviewTask, llm: LLMClient, sample_chars: int) -> Optional[ComparativeBenchmark]:
    try:
        return benchmark(task, llm, sample_chars)
    except Exception as e:
        logger.warning("Benchmark analysis failed, omitting it: %s", e)
        return None


class ReviewOrchestrator:
    """
    Fans one review task out to the reviewer personas and merges their verdicts.

    The completion client is injected so tests can substitute a double. The
    orchestrator keeps no state between calls.
    """

    def __init__(self, llm: LLMClient, config: Config = None, reviewer_classes: List[type] = None):
        self.llm = llm
        self.config = config or Config()
        self.reviewer_classes = reviewer_classes or REVIEWER_CLASSES

    def review(self, task: Union[ReviewTask, Any]) -> ReviewOutcome:
        """
        Produce the aggregate review for a task.

        Args:
            task: A ReviewTask, or a decoded request body to validate first

        Returns:
            ReviewOutcome with the three reviewer verdicts merged

        Raises:
            TaskValidationError: malformed task, raised before any upstream call
            UpstreamTimeout: the reviewers did not all settle within the deadline
            UpstreamRateLimited / UpstreamError: every reviewer call failed
        """
        if not isinstance(task, ReviewTask):
            task = ReviewTask.from_payload(task)

        deadline = time.monotonic() + self.config.timeout
        agents = [cls(self.llm) for cls in self.reviewer_classes]

        # No context manager: on timeout the executor must not wait for running calls
        executor = ThreadPoolExecutor(max_workers=len(agents) + 1, thread_name_prefix="reviewer")
        try:
            # The benchmark runs alongside the reviewers; it never blocks or fails them
            benchmark_future = None
            if task.has_samples:
                benchmark_future = executor.submit(run_benchmark_task, task, self.llm, self.config.sample_chars)

            futures = [executor.submit(run_reviewer_task, agent, task) for agent in agents]
            logger.info("Running %d reviewers (benchmark: %s)", len(futures), benchmark_future is not None)

            _, pending = wait(futures, timeout=self._remaining(deadline))
            if pending:
                logger.error("Review timed out with %d reviewer(s) outstanding", len(pending))
                raise UpstreamTimeout(REVIEW_TIMEOUT_MESSAGE)

            # Results keep role order regardless of completion order
            results = [future.result() for future in futures]
            failures = [result.failure for result in results if result.failure is not None]
            if len(failures) == len(results):
                raise from_completion_failure(failures[0], "Failed to review paper",
                                              timeout_message=REVIEW_TIMEOUT_MESSAGE)

            comparative = self._collect_benchmark(benchmark_future, deadline)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        outcome = merge_verdicts([(result.role, result.verdict) for result in results],
                                 benchmark=comparative,
                                 max_issues=self.config.max_critical_issues)
        logger.info("Paper review complete (score: %.1f/10, %s)", outcome.overall_score, outcome.recommendation)
        return outcome

    def _collect_benchmark(self, future: Optional[Future], deadline: float) -> Optional[ComparativeBenchmark]:
        if future is None:
            return None
        done, _ = wait([future], timeout=self._remaining(deadline))
        if not done:
            logger.warning("Benchmark did not finish before the deadline, omitting it")
            return None
        return future.result()

    @staticmethod
    def _remaining(deadline: float) -> float:
        return max(0.0, deadline - time.monotonic())
