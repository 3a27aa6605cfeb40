"""Keyword categorization and emphasis formatting for legal answers.

Both helpers are pure functions over fixed tables. Declaration order in
the tables is significant: categorization returns the first match, and
formatting applies term emphasis before citation emphasis.
"""

import re

DEFAULT_CATEGORY = "General Constitutional Law"


def _articles(first: int, last: int) -> tuple[str, ...]:
    return tuple(f"article {n}" for n in range(first, last + 1))


# Scanned top to bottom, keywords left to right.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Fundamental Rights",
        ("right", "freedom", "equality", "discrimination") + _articles(14, 32),
    ),
    (
        "Directive Principles",
        ("directive", "principle", "policy") + _articles(36, 51),
    ),
    (
        "Judiciary",
        ("court", "judge", "judicial", "supreme", "high", "district", "tribunal")
        + _articles(124, 147),
    ),
    (
        "Legislature",
        ("parliament", "lok sabha", "rajya sabha", "bill", "act", "legislation")
        + _articles(79, 100),
    ),
    (
        "Executive",
        ("president", "prime minister", "cabinet", "council of ministers", "governor")
        + _articles(52, 75),
    ),
    (
        "Constitutional History",
        (
            "history",
            "constituent assembly",
            "drafting",
            "adoption",
            "amendment",
            "preamble",
            "objective resolution",
        ),
    ),
)

LEGAL_TERMS: tuple[str, ...] = (
    "Article",
    "Section",
    "Amendment",
    "Constitution",
    "Supreme Court",
    "High Court",
    "Fundamental Rights",
    "Directive Principles",
    "Writ",
    "Habeas Corpus",
    "Mandamus",
    "Certiorari",
    "Prohibition",
    "Quo Warranto",
)

_TERM_PATTERNS = tuple(
    re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE) for term in LEGAL_TERMS
)

# Article 21, Article 21A, Article 19(1)
ARTICLE_CITATION = re.compile(r"\b(Article\s+\d+[A-Z]?(\(\d+\))?)", re.IGNORECASE)

# Kesavananda v State, Golaknath v. Punjab
CASE_CITATION = re.compile(r"\b([A-Za-z]+\s+v\.?\s+[A-Za-z]+)")


def categorize_question(question: str) -> str:
    """Return the topic category of a question.

    Args:
        question: Free text from the user.

    Returns:
        The first category whose keyword occurs in the lower-cased question,
        or DEFAULT_CATEGORY when none does.
    """
    lowered = question.lower()

    for category, keywords in CATEGORY_KEYWORDS:
        for keyword in keywords:
            if keyword in lowered:
                return category

    return DEFAULT_CATEGORY


def format_legal_response(text: str) -> str:
    """Add markdown emphasis to legal terms and citations.

    Terms are bolded first, then article citations are bolded and case
    citations italicised. A citation that already contains a bolded term
    keeps both sets of markers.
    """
    formatted = text

    for pattern in _TERM_PATTERNS:
        formatted = pattern.sub(lambda m: f"**{m.group(0)}**", formatted)

    formatted = ARTICLE_CITATION.sub(r"**\1**", formatted)
    formatted = CASE_CITATION.sub(r"*\1*", formatted)

    return formatted
