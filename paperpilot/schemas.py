import math
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import TaskValidationError

REQUIRED_SECTIONS = ("abstract", "introduction", "method", "results")
CITATION_ACTIONS = ("range", "move", "accept")
CONFIDENCE_LEVELS = ("high", "medium", "low")
CITE_TYPES = ("GENERAL", "OWN", "EXTERNAL")


def _string_list(value: Any) -> List[str]:
    """Coerce a model-supplied list into a list of non-empty strings."""
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if item is None:
            continue
        text = item if isinstance(item, str) else str(item)
        if text.strip():
            items.append(text)
    return items


def _number(value: Any) -> Optional[Union[int, float]]:
    """Finite number from model output, else None. NaN and infinities cannot be sent as JSON."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(parsed):
            return None
        return int(parsed) if parsed.is_integer() else parsed
    return None


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Review task
# ---------------------------------------------------------------------------

class PaperSections(BaseModel):
    abstract: str = Field(min_length=1)
    introduction: str = Field(min_length=1)
    method: str = Field(min_length=1)
    results: str = Field(min_length=1)
    discussion: Optional[str] = None


class ReviewTask(_WireModel):
    sections: PaperSections
    venue: Optional[str] = None
    profile_id: Optional[str] = Field(default=None, alias="profileId")
    accepted_samples: List[str] = Field(default_factory=list, alias="acceptedSamples")
    rejected_samples: List[str] = Field(default_factory=list, alias="rejectedSamples")

    @field_validator("accepted_samples", "rejected_samples", mode="before")
    @classmethod
    def _sample_abstracts(cls, value: Any) -> List[str]:
        # Samples arrive either as bare abstracts or as {"abstract": ...} objects
        if not isinstance(value, list):
            return []
        abstracts = []
        for sample in value:
            if isinstance(sample, dict) and sample.get("abstract"):
                abstracts.append(_text(sample["abstract"]))
            elif sample:
                abstracts.append(_text(sample))
        return abstracts

    @property
    def has_samples(self) -> bool:
        return bool(self.accepted_samples or self.rejected_samples)

    @classmethod
    def from_payload(cls, payload: Any) -> "ReviewTask":
        """Validate a decoded request body, raising TaskValidationError on bad input."""
        if not isinstance(payload, dict):
            raise TaskValidationError("Request body must be a JSON object")
        sections = payload.get("sections")
        if not isinstance(sections, dict):
            raise TaskValidationError("sections object is required")
        missing = [name for name in REQUIRED_SECTIONS if not sections.get(name)]
        if missing:
            raise TaskValidationError(
                "Required sections: " + ", ".join(REQUIRED_SECTIONS),
                details="Missing or empty: " + ", ".join(missing),
            )
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise TaskValidationError("Invalid review request", details=str(e)) from e


# ---------------------------------------------------------------------------
# Review results
# ---------------------------------------------------------------------------

class ReviewerVerdict(BaseModel):
    score: Union[int, float] = 5
    strengths: List[str] = []
    weaknesses: List[str] = []
    comment: str = ""

    @classmethod
    def from_payload(cls, data: Any) -> "ReviewerVerdict":
        """Build a verdict from extracted JSON; any unusable field keeps its default."""
        if not isinstance(data, dict):
            return cls()
        score = _number(data.get("score"))
        if score is None:
            score = 5
        return cls(
            score=min(10, max(0, score)),
            strengths=_string_list(data.get("strengths")),
            weaknesses=_string_list(data.get("weaknesses")),
            comment=_text(data.get("comment")),
        )


class ReviewerScore(_WireModel):
    persona: str
    focus: str
    score: Union[int, float]
    strengths: List[str] = []
    weaknesses: List[str] = []
    detailed_comment: str = Field(default="", alias="detailedComment")


class CriticalIssue(BaseModel):
    id: str
    severity: str
    category: str
    issue: str


class ComparativeBenchmark(_WireModel):
    your_novelty_score: Optional[Union[int, float]] = Field(default=None, alias="yourNoveltyScore")
    accepted_avg_novelty: Optional[Union[int, float]] = Field(default=None, alias="acceptedAvgNovelty")
    your_rigor_score: Optional[Union[int, float]] = Field(default=None, alias="yourRigorScore")
    accepted_avg_rigor: Optional[Union[int, float]] = Field(default=None, alias="acceptedAvgRigor")
    key_gaps: List[str] = Field(default_factory=list, alias="keyGaps")
    strengths: List[str] = []

    @classmethod
    def from_payload(cls, data: Any) -> Optional["ComparativeBenchmark"]:
        if not isinstance(data, dict):
            return None
        return cls(
            your_novelty_score=_number(data.get("yourNoveltyScore")),
            accepted_avg_novelty=_number(data.get("acceptedAvgNovelty")),
            your_rigor_score=_number(data.get("yourRigorScore")),
            accepted_avg_rigor=_number(data.get("acceptedAvgRigor")),
            key_gaps=_string_list(data.get("keyGaps")),
            strengths=_string_list(data.get("strengths")),
        )


class ReviewOutcome(_WireModel):
    overall_score: float = Field(alias="overallScore")
    accept_probability: int = Field(alias="acceptProbability")
    recommendation: str
    reviewer_scores: List[ReviewerScore] = Field(alias="reviewerScores")
    critical_issues: List[CriticalIssue] = Field(alias="criticalIssues")
    comparative_benchmark: Optional[ComparativeBenchmark] = Field(default=None, alias="comparativeBenchmark")

    def to_response(self) -> Dict[str, Any]:
        """Wire representation; an absent benchmark is left out entirely."""
        body = self.model_dump(by_alias=True, exclude={"comparative_benchmark"})
        if self.comparative_benchmark is not None:
            body["comparativeBenchmark"] = self.comparative_benchmark.model_dump(by_alias=True)
        return body


# ---------------------------------------------------------------------------
# Writing assistant requests
# ---------------------------------------------------------------------------

class TermRequest(_WireModel):
    term: str
    context: str = ""
    profile_id: Optional[str] = Field(default=None, alias="profileId")


class CitationCandidate(BaseModel):
    id: Union[str, int]
    text: str = ""
    context: str = ""
    reason: str = ""


class CitationsBatchRequest(_WireModel):
    candidates: Optional[List[CitationCandidate]] = None
    profile_id: Optional[str] = Field(default=None, alias="profileId")


class FormatRequest(_WireModel):
    raw_caption: str = Field(alias="rawCaption")


class FormatReferenceRequest(_WireModel):
    input: Optional[Any] = None
    style: Optional[str] = None
    profile_id: Optional[str] = Field(default=None, alias="profileId")


class CiteRequest(BaseModel):
    sentence: str


# ---------------------------------------------------------------------------
# Writing assistant results
# ---------------------------------------------------------------------------

class TermAnalysis(_WireModel):
    is_informal: bool = Field(default=False, alias="isInformal")
    suggestions: List[str] = []
    reason: str = ""

    @classmethod
    def from_payload(cls, data: Any, fallback: "TermAnalysis") -> "TermAnalysis":
        if not isinstance(data, dict):
            return fallback
        return cls(
            is_informal=data.get("isInformal") is True,
            suggestions=_string_list(data.get("suggestions")),
            reason=_text(data.get("reason"), fallback.reason),
        )


class CitationSuggestion(BaseModel):
    id: Union[str, int]
    action: str = "accept"
    suggestion: Optional[str] = None
    confidence: str = "low"
    rationale: str = ""

    @classmethod
    def from_payload(cls, data: Any) -> Optional["CitationSuggestion"]:
        if not isinstance(data, dict) or data.get("id") is None:
            return None
        action = data.get("action") if data.get("action") in CITATION_ACTIONS else "accept"
        suggestion = data.get("suggestion")
        return cls(
            id=data["id"] if isinstance(data["id"], (str, int)) else str(data["id"]),
            action=action,
            suggestion=None if action == "accept" or suggestion is None else _text(suggestion),
            confidence=data.get("confidence") if data.get("confidence") in CONFIDENCE_LEVELS else "low",
            rationale=_text(data.get("rationale")),
        )


class CaptionParts(BaseModel):
    prefix: str = ""
    number: str = ""
    separator: str = ""
    content: str = ""

    @classmethod
    def from_payload(cls, data: Any, fallback: "CaptionParts") -> "CaptionParts":
        if not isinstance(data, dict):
            return fallback
        return cls(
            prefix=_text(data.get("prefix")),
            number=_text(data.get("number")),
            separator=_text(data.get("separator")),
            content=_text(data.get("content"), fallback.content),
        )


class FormattedReference(BaseModel):
    formatted: str
    authors: List[str] = []
    title: str = ""
    venue: str = ""
    year: Union[int, str] = 0
    doi: str = ""
    confidence: str = "low"

    @classmethod
    def from_payload(cls, data: Any, fallback: "FormattedReference") -> "FormattedReference":
        if not isinstance(data, dict):
            return fallback
        year = _number(data.get("year"))
        confidence = data.get("confidence")
        return cls(
            formatted=_text(data.get("formatted"), fallback.formatted),
            authors=_string_list(data.get("authors")),
            title=_text(data.get("title"), fallback.title),
            venue=_text(data.get("venue")),
            year=int(year) if year is not None else 0,
            doi=_text(data.get("doi")),
            confidence=confidence if confidence in CONFIDENCE_LEVELS else "low",
        )


class CiteClassification(BaseModel):
    type: str = "GENERAL"
    reason: str = ""

    @classmethod
    def from_payload(cls, data: Any, fallback: "CiteClassification") -> "CiteClassification":
        if not isinstance(data, dict):
            return fallback
        kind = _text(data.get("type")).upper()
        return cls(
            type=kind if kind in CITE_TYPES else fallback.type,
            reason=_text(data.get("reason"), fallback.reason),
        )
