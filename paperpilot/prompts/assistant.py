import re
from typing import List, Optional

from paperpilot.prompts.builder import JSON_ONLY, Prompt
from paperpilot.prompts.venue import profile_context
from paperpilot.schemas import CitationCandidate

DOI_PATTERN = re.compile(r"^10\.\d{4,9}/\S+$", re.IGNORECASE)
ARXIV_PATTERN = re.compile(r"arxiv:\s*\d{4}\.\d{4,5}", re.IGNORECASE)

TERM_SYSTEM = """You are an expert academic writing assistant for top-tier research papers. Your task is to thoroughly analyze the selected term/phrase within its full context.

IMPORTANT CHECKS (in order of priority):
1. **Spelling errors** - Check for typos, misspellings, or incorrect word forms
2. **Grammar errors** - Subject-verb agreement, tense consistency, article usage
3. **Formality** - Is it appropriate for academic publications (Nature, Science, AAAI, ACL, etc.)?
4. **Clarity** - Is the term precise and unambiguous in this context?
5. **Conciseness** - Can it be expressed more succinctly without losing meaning?

CONTEXT: You are provided with surrounding paragraphs. Use this full context to understand:
- The surrounding sentences and their meaning
- The author's intent and argument flow
- Domain-specific terminology and conventions

Respond ONLY with valid JSON format."""

TERM_INSTRUCTIONS = """Analyze the term thoroughly:
1. Check for spelling/typo errors first
2. Check grammar errors
3. Evaluate formality for academic writing
4. Consider the full context to understand proper usage

If ANY issues found, provide:
- 3-5 high-quality alternatives that fit the context
- Detailed reasoning explaining what's wrong and why each suggestion is better
- Be specific about whether it's a spelling error, grammar error, formality issue, or clarity problem

If the term is perfect as-is, explain why it's appropriate.

Return JSON: { "isInformal": boolean, "suggestions": string[], "reason": string }

Note:
- isInformal=true if there are ANY issues (spelling, grammar, formality, clarity)
- suggestions should be contextually appropriate, not just generic synonyms
- reason should be detailed and educational (2-4 sentences minimum)"""

CITATIONS_SYSTEM = ("You are an academic citation style advisor. Analyze citation placements and formats "
                    "for research papers. Respond ONLY with valid JSON format.")

CITATIONS_INSTRUCTIONS = """Analyze the following citation candidates for potential improvements. For each candidate, suggest:
- Whether to apply a range notation (e.g., [1], [2], [3] → [1-3])
- Whether to move the citation to a better position
- Whether the current style is acceptable as-is

Return a JSON array with one entry per candidate in the same order:
[
  {
    "id": "cite_ai_...",
    "action": "range" | "move" | "accept",
    "suggestion": "string (specific suggestion, or null if accept)",
    "confidence": "high" | "medium" | "low",
    "rationale": "brief explanation"
  }
]"""

CAPTION_SYSTEM = ("You are a structural parser. Extract components from a figure/table caption. "
                  "Respond ONLY with valid JSON format.")

CAPTION_INSTRUCTIONS = """Extract prefix, number, separator, and main content.
Return JSON: { "prefix": string, "number": string, "separator": string, "content": string }"""

REFERENCE_SYSTEM = ("You are a citation formatting assistant. Given a DOI, arXiv ID, or paper title, format it "
                    "according to the specified style (IEEE, Nature, APA, etc.). Use web search to find accurate "
                    "metadata. Respond ONLY with valid JSON format.")

REFERENCE_SHAPE = """Return JSON:
{
  "formatted": "full formatted citation string",
  "authors": ["Author 1", "Author 2"],
  "title": "Paper Title",
  "venue": "Conference/Journal Name",
  "year": 2024,
  "doi": "10.xxxx/xxxxx",
  "confidence": "high" | "medium" | "low"
}"""

CITE_SYSTEM = "Classify if the sentence is a claim that needs a citation. " + JSON_ONLY

CITE_INSTRUCTIONS = """Classify as: "GENERAL" (fact), "OWN" (author's result), or "EXTERNAL" (external claim).
Return JSON: { "type": "GENERAL" | "OWN" | "EXTERNAL", "reason": string }"""


def term_prompt(term: str, context: str, profile_id: Optional[str]) -> Prompt:
    user = (
        'Selected term/phrase: "' + term + '"\n\n'
        'Full context (surrounding paragraphs):\n"""\n' + context + '\n"""\n\n'
        + TERM_INSTRUCTIONS
    )
    return Prompt(system=TERM_SYSTEM + profile_context(profile_id), user=user)


def citations_prompt(candidates: List[CitationCandidate], profile_id: Optional[str]) -> Prompt:
    entries = []
    for i, candidate in enumerate(candidates, start=1):
        entries.append(
            f"[{i}] ID: {candidate.id}\n"
            '   Text: "' + candidate.text + '"\n'
            '   Context: "' + candidate.context + '"\n'
            "   Reason: " + candidate.reason
        )
    user = (
        CITATIONS_INSTRUCTIONS
        + "\n\nCitation Candidates:\n" + "\n\n".join(entries) + "\n"
        + profile_context(profile_id)
    )
    return Prompt(system=CITATIONS_SYSTEM, user=user)


def caption_prompt(raw_caption: str) -> Prompt:
    return Prompt(system=CAPTION_SYSTEM, user='Caption: "' + raw_caption + '"\n\n' + CAPTION_INSTRUCTIONS)


def reference_kind(value: str) -> str:
    """Classify a reference lookup as "doi", "arxiv" or "title"."""
    if DOI_PATTERN.match(value.strip()):
        return "doi"
    if ARXIV_PATTERN.search(value):
        return "arxiv"
    return "title"


def reference_search_hint(value: str) -> str:
    kind = reference_kind(value)
    if kind == "doi":
        return "doi:" + value + " citation metadata"
    if kind == "arxiv":
        return value + " citation"
    return '"' + value + '" academic paper citation'


def reference_prompt(value: str, style: Optional[str], profile_id: Optional[str]) -> Prompt:
    style = style or "IEEE"
    user = (
        "Input: " + value + "\n"
        "Style: " + style + "\n"
        "Profile: " + (profile_id or "generic") + "\n"
        "Search hint: " + reference_search_hint(value) + "\n\n"
        "Search for this paper's metadata and format it according to " + style + " citation style.\n\n"
        + REFERENCE_SHAPE
    )
    return Prompt(system=REFERENCE_SYSTEM, user=user)


def cite_prompt(sentence: str) -> Prompt:
    return Prompt(system=CITE_SYSTEM, user='Sentence: "' + sentence + '"\n\n' + CITE_INSTRUCTIONS)
