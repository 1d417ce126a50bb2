"""Content statistics for the SEO auditor."""
from __future__ import annotations

import re
from collections import Counter

from site_audit.fetcher.url import normalize_whitespace

STOP_WORDS = frozenset({
    "a", "about", "above", "after", "again", "against", "all", "am", "an", "and",
    "any", "are", "as", "at", "be", "because", "been", "before", "being", "below",
    "between", "both", "but", "by", "can", "could", "did", "do", "does", "doing",
    "down", "during", "each", "few", "for", "from", "further", "had", "has", "have",
    "having", "he", "her", "here", "hers", "herself", "him", "himself", "his", "how",
    "if", "in", "into", "is", "it", "its", "itself", "just", "me", "more", "most",
    "my", "myself", "no", "nor", "not", "now", "of", "off", "on", "once", "only",
    "or", "other", "our", "ours", "ourselves", "out", "over", "own", "same", "she",
    "should", "so", "some", "such", "than", "that", "the", "their", "theirs", "them",
    "themselves", "then", "there", "these", "they", "this", "those", "through", "to",
    "too", "under", "until", "up", "very", "was", "we", "were", "what", "when",
    "where", "which", "while", "who", "whom", "why", "will", "with", "would", "you",
    "your", "yours", "yourself", "yourselves",
})

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def get_word_count(text: str) -> int:
    if not text:
        return 0
    return len(text.split())


def calculate_text_to_html_ratio(text: str, html: str) -> float:
    """Visible text length as a percentage of the HTML length."""
    html_length = len(normalize_whitespace(html))
    if html_length == 0:
        return 0.0
    return round(len(text) / html_length * 100, 2)


def extract_top_keywords(text: str, top_n: int = 5) -> dict:
    """Most frequent non-stop-words with their density.

    Ties are broken alphabetically.

    Returns:
        Dict with ``total_significant_words`` and ``top_keywords``
    """
    tokens = _NON_ALNUM.sub(" ", (text or "").lower()).split()
    significant = [t for t in tokens if t not in STOP_WORDS and len(t) >= 2]

    if not significant:
        return {"total_significant_words": 0, "top_keywords": []}

    frequencies = Counter(significant)
    ranked = sorted(frequencies.items(), key=lambda item: (-item[1], item[0]))[:top_n]

    return {
        "total_significant_words": len(significant),
        "top_keywords": [
            {
                "word": word,
                "count": count,
                "density": f"{count / len(significant) * 100:.1f}%",
            }
            for word, count in ranked
        ],
    }
