from typing import List, Optional, Tuple

# Checked in order; the first family with a keyword contained in the profile id wins
VENUE_FAMILIES: List[Tuple[str, Tuple[str, ...], str]] = [
    (
        "ieee",
        ("ieee", "postech", "kaist"),
        "Journal Context: IEEE/Technical - Prioritize technical precision and formal engineering "
        "terminology. Avoid conversational or colloquial terms.",
    ),
    (
        "nature",
        ("nature", "cell", "science"),
        "Journal Context: Nature/Cell - Target broad scientific audience. Prefer clear, accessible "
        "language while maintaining scientific rigor. Avoid overly technical jargon when simpler "
        "terms exist.",
    ),
    (
        "ml_conference",
        ("neurips", "icml", "aaai", "acl", "emnlp"),
        "Journal Context: ML Conference - Modern AI/ML research community. Accepts contemporary "
        "terminology (e.g., 'we', 'our approach'). Prioritize clarity and common ML conventions.",
    ),
    (
        "acm_springer",
        ("acm", "springer"),
        "Journal Context: ACM/Springer - Standard academic formality. Balance technical precision "
        "with readability.",
    ),
]


def classify_profile(profile_id: Optional[str]) -> Optional[str]:
    """Return the venue family name for a profile id, or None when nothing matches."""
    if not profile_id:
        return None
    profile = profile_id.lower()
    for family, keywords, _ in VENUE_FAMILIES:
        if any(keyword in profile for keyword in keywords):
            return family
    return None


def profile_context(profile_id: Optional[str]) -> str:
    """Context paragraph appended to system instructions, "" for unknown profiles."""
    family = classify_profile(profile_id)
    for name, _, text in VENUE_FAMILIES:
        if name == family:
            return "\n\n" + text
    return ""
