from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class SectionView:
    """One paper section a reviewer may read, cut to `max_chars` (None keeps it whole)."""
    name: str
    label: str
    max_chars: Optional[int] = None
    optional: bool = False


@dataclass(frozen=True)
class IssuePolicy:
    """How a reviewer's weaknesses feed the critical issue list."""
    prefix: str
    category: str
    severity: str


@dataclass(frozen=True)
class ReviewerRole:
    persona: str
    label: str
    description: str
    focus: str
    focus_points: Tuple[str, ...]
    sections: Tuple[SectionView, ...]
    issues: Optional[IssuePolicy] = None


THEORIST = ReviewerRole(
    persona="Theorist",
    label="Reviewer A",
    description="a theorist evaluating novelty and technical soundness",
    focus="novelty_and_formalism",
    focus_points=("Contribution clarity", "Novelty assessment", "Technical rigor", "Problem formulation"),
    sections=(
        SectionView("abstract", "Abstract"),
        SectionView("introduction", "Introduction", 2000),
        SectionView("method", "Method", 2000),
    ),
    issues=IssuePolicy(prefix="issue_a", category="novelty", severity="medium"),
)

EXPERIMENTALIST = ReviewerRole(
    persona="Experimentalist",
    label="Reviewer B",
    description="an experimentalist evaluating empirical rigor",
    focus="empirical_rigor",
    focus_points=("Experimental design", "Baseline comparisons", "Statistical validity", "Reproducibility"),
    sections=(
        SectionView("method", "Method", 2000),
        SectionView("results", "Results", 2000),
    ),
    issues=IssuePolicy(prefix="issue_b", category="experiment", severity="high"),
)

# Impact weaknesses are intentionally kept out of the critical issue list
IMPACT_ASSESSOR = ReviewerRole(
    persona="Impact_Assessor",
    label="Reviewer C",
    description="assessing impact and significance",
    focus="significance_and_impact",
    focus_points=("Problem importance", "Practical applicability", "Community value", "Long-term impact"),
    sections=(
        SectionView("abstract", "Abstract"),
        SectionView("introduction", "Introduction", 1500),
        SectionView("discussion", "Discussion", 1500, optional=True),
    ),
)

# Order matters: it is the order of reviewerScores and of the critical issues
REVIEWER_ROLES: Tuple[ReviewerRole, ...] = (THEORIST, EXPERIMENTALIST, IMPACT_ASSESSOR)
