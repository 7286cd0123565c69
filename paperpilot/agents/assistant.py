"""Single-call writing assistant operations.

Each function sends one prompt and parses the reply with a typed fallback.
Completion failures propagate as CompletionFailure; request validation
failures raise TaskValidationError before any upstream call.
"""
import logging
from typing import List

from paperpilot.errors import TaskValidationError
from paperpilot.llm.base import LLMClient
from paperpilot.llm.constants import TaskLLMConfig, TaskLLMConfigs
from paperpilot.parsing.extract import extract_json
from paperpilot.prompts import assistant as prompts
from paperpilot.prompts.builder import Prompt
from paperpilot.schemas import (
    CaptionParts,
    CitationsBatchRequest,
    CitationSuggestion,
    CiteClassification,
    CiteRequest,
    FormatReferenceRequest,
    FormatRequest,
    FormattedReference,
    TermAnalysis,
    TermRequest,
)

logger = logging.getLogger(__name__)


def _complete(llm: LLMClient, prompt: Prompt, config: TaskLLMConfig) -> str:
    return llm.generate(prompt.user, system=prompt.system,
                        temperature=config.temperature, max_tokens=config.max_tokens)


def check_term(request: TermRequest, llm: LLMClient) -> TermAnalysis:
    fallback = TermAnalysis(is_informal=False, suggestions=[], reason="Unable to analyze term")
    prompt = prompts.term_prompt(request.term, request.context, request.profile_id)
    response = _complete(llm, prompt, TaskLLMConfigs.TERM_CHECK)
    result = TermAnalysis.from_payload(extract_json(response, None), fallback)
    logger.info("Term check (profile: %s): informal=%s", request.profile_id or "none", result.is_informal)
    return result


def analyze_citations(request: CitationsBatchRequest, llm: LLMClient,
                      max_candidates: int = 100) -> List[CitationSuggestion]:
    """Suggest range/move/accept for each citation candidate, in input order.

    Entries the model returns for unknown ids are kept after the known ones.
    """
    candidates = request.candidates
    if not candidates:
        raise TaskValidationError("candidates array is required")
    if len(candidates) > max_candidates:
        raise TaskValidationError(f"Maximum {max_candidates} candidates per batch",
                                  details=f"Received {len(candidates)} candidates")

    prompt = prompts.citations_prompt(candidates, request.profile_id)
    response = _complete(llm, prompt, TaskLLMConfigs.CITATIONS_BATCH)
    data = extract_json(response, [])
    if not isinstance(data, list):
        logger.warning("Citation batch reply was not a JSON array, returning no suggestions")
        return []

    suggestions = [s for s in (CitationSuggestion.from_payload(entry) for entry in data) if s is not None]
    position = {str(candidate.id): i for i, candidate in enumerate(candidates)}
    suggestions.sort(key=lambda s: position.get(str(s.id), len(candidates)))
    logger.info("Batch citation analysis: %d candidates, %d suggestions", len(candidates), len(suggestions))
    return suggestions


def parse_caption(request: FormatRequest, llm: LLMClient) -> CaptionParts:
    fallback = CaptionParts(prefix="", number="", separator="", content=request.raw_caption)
    response = _complete(llm, prompts.caption_prompt(request.raw_caption), TaskLLMConfigs.CAPTION_FORMAT)
    return CaptionParts.from_payload(extract_json(response, None), fallback)


def format_reference(request: FormatReferenceRequest, llm: LLMClient) -> FormattedReference:
    if not request.input or not isinstance(request.input, str):
        raise TaskValidationError("input (DOI or title) is required")

    fallback = FormattedReference(formatted=request.input, authors=[], title=request.input,
                                  venue="", year=0, doi="", confidence="low")
    prompt = prompts.reference_prompt(request.input, request.style, request.profile_id)
    response = _complete(llm, prompt, TaskLLMConfigs.REFERENCE_FORMAT)
    result = FormattedReference.from_payload(extract_json(response, None), fallback)
    logger.info("Reference formatted (%s, confidence %s)", prompts.reference_kind(request.input), result.confidence)
    return result


def classify_citation_need(request: CiteRequest, llm: LLMClient) -> CiteClassification:
    fallback = CiteClassification(type="GENERAL", reason="Unable to classify")
    response = _complete(llm, prompts.cite_prompt(request.sentence), TaskLLMConfigs.CITE_CHECK)
    return CiteClassification.from_payload(extract_json(response, None), fallback)
