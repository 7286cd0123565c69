from dataclasses import dataclass
from typing import List

from paperpilot.agents.router import SectionRouter
from paperpilot.prompts.roles import ReviewerRole
from paperpilot.prompts.venue import profile_context
from paperpilot.schemas import ReviewTask

JSON_ONLY = "Respond ONLY with valid JSON."

VERDICT_SHAPE = """Provide JSON:
{
  "score": 0-10,
  "strengths": ["strength 1", "strength 2"],
  "weaknesses": ["weakness 1", "weakness 2"],
  "comment": "2-3 sentence summary"
}"""

BENCHMARK_SHAPE = """Provide JSON:
{
  "yourNoveltyScore": 0-10,
  "acceptedAvgNovelty": 0-10,
  "yourRigorScore": 0-10,
  "acceptedAvgRigor": 0-10,
  "keyGaps": ["gap 1", "gap 2"],
  "strengths": ["strength vs rejected papers"]
}"""


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


_router = SectionRouter()


def venue_context(task: ReviewTask) -> str:
    context = profile_context(task.profile_id)
    if task.venue:
        context += "\nTarget Venue: " + task.venue
    return context


def build_prompt(role: ReviewerRole, task: ReviewTask) -> Prompt:
    """Build the system and user messages for one reviewer persona.

    Paper text is only concatenated into the messages. It is never passed
    through str.format, so braces or template markers in a submission stay
    literal.
    """
    focus = ", ".join(f"({i}) {point}" for i, point in enumerate(role.focus_points, start=1))
    system = (
        f"You are {role.label}, {role.description}. Focus on: {focus}."
        + venue_context(task)
        + "\n\n" + JSON_ONLY
    )

    parts = ["Review this paper:"]
    for label, text in _router.route(role, task.sections):
        parts.append(label + ": " + text)
    parts.append(VERDICT_SHAPE)
    return Prompt(system=system, user="\n\n".join(parts))


def _sample_block(title: str, kind: str, samples: List[str], max_chars: int) -> str:
    lines = [f"{kind} #{i}: {sample[:max_chars]}" for i, sample in enumerate(samples, start=1)]
    return f"\n\n{title}:\n" + "\n\n".join(lines)


def build_benchmark_prompt(task: ReviewTask, sample_chars: int = 400) -> Prompt:
    """Compare the submission's abstract with accepted and rejected sample abstracts."""
    comparison = ""
    if task.accepted_samples:
        comparison += _sample_block("Accepted Paper Samples (for comparison)", "Accepted",
                                    task.accepted_samples, sample_chars)
    if task.rejected_samples:
        comparison += _sample_block("Rejected Paper Samples (for comparison)", "Rejected",
                                    task.rejected_samples, sample_chars)

    system = (
        "You are an expert at comparing research papers. Analyze the differences between this "
        "paper and accepted/rejected samples. " + JSON_ONLY
    )
    user = (
        "Compare this paper's abstract with the samples:\n\n"
        "Current Paper Abstract: " + task.sections.abstract + "\n"
        + comparison + "\n\n"
        + BENCHMARK_SHAPE
    )
    return Prompt(system=system, user=user)
