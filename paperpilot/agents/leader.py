import math
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence, Tuple

from ..prompts.roles import ReviewerRole
from ..schemas import (
    ComparativeBenchmark,
    CriticalIssue,
    ReviewOutcome,
    ReviewerScore,
    ReviewerVerdict,
)

# Evaluated top to bottom, first match wins
RECOMMENDATION_TIERS: List[Tuple[float, str]] = [
    (8.0, "strong_accept"),
    (7.0, "weak_accept"),
    (6.0, "borderline_accept"),
    (5.0, "borderline_reject"),
    (4.0, "weak_reject"),
]
LOWEST_TIER = "reject"

# Linear heuristic: score 3 maps to 0%, score 9 to ~100%. Not a calibrated probability.
PROBABILITY_FLOOR_SCORE = 3.0
PROBABILITY_SLOPE = 16.67


def overall_score(scores: Sequence[float]) -> float:
    """Arithmetic mean rounded half-up to one decimal place."""
    mean = sum(scores) / len(scores)
    return float(Decimal(repr(mean)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def accept_probability(score: float) -> int:
    raw = (score - PROBABILITY_FLOOR_SCORE) * PROBABILITY_SLOPE
    clamped = min(100.0, max(0.0, raw))
    return int(math.floor(clamped + 0.5))


def recommendation(score: float) -> str:
    for threshold, tier in RECOMMENDATION_TIERS:
        if score >= threshold:
            return tier
    return LOWEST_TIER


def critical_issues(verdicts: Sequence[Tuple[ReviewerRole, ReviewerVerdict]], limit: int = 5) -> List[CriticalIssue]:
    """Weaknesses of roles that carry an issue policy, in role order, capped at `limit`.

    Roles without a policy (the impact assessor) never contribute.
    """
    issues: List[CriticalIssue] = []
    for role, verdict in verdicts:
        if role.issues is None:
            continue
        for i, weakness in enumerate(verdict.weaknesses):
            issues.append(CriticalIssue(
                id=f"{role.issues.prefix}{i}",
                severity=role.issues.severity,
                category=role.issues.category,
                issue=weakness,
            ))
    return issues[:limit]


def merge_verdicts(verdicts: Sequence[Tuple[ReviewerRole, ReviewerVerdict]],
                   benchmark: Optional[ComparativeBenchmark] = None,
                   max_issues: int = 5) -> ReviewOutcome:
    """Combine per-reviewer verdicts into the final outcome. Deterministic for equal inputs."""
    score = overall_score([verdict.score for _, verdict in verdicts])
    reviewer_scores = [
        ReviewerScore(
            persona=role.persona,
            focus=role.focus,
            score=verdict.score,
            strengths=verdict.strengths,
            weaknesses=verdict.weaknesses,
            detailed_comment=verdict.comment,
        )
        for role, verdict in verdicts
    ]
    return ReviewOutcome(
        overall_score=score,
        accept_probability=accept_probability(score),
        recommendation=recommendation(score),
        reviewer_scores=reviewer_scores,
        critical_issues=critical_issues(verdicts, max_issues),
        comparative_benchmark=benchmark,
    )
