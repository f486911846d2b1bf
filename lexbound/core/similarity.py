"""Bag-of-words cosine similarity.

Whitespace tokens, case-folded, raw term frequency,
no stemming or IDF. Callers only rely on "higher score means more related".
"""

import math
from collections import Counter


def tokenize(text: str) -> list[str]:
    """Split text on whitespace after case folding."""
    return text.lower().split()


def similarity(text1: str, text2: str) -> float:
    """Cosine of the term-frequency vectors of two strings, in [0, 1].

    Args:
        text1: First text
        text2: Second text

    Returns:
        Similarity score; 0.0 when either text has no tokens
    """
    counts1 = Counter(tokenize(text1))
    counts2 = Counter(tokenize(text2))

    if not counts1 or not counts2:
        return 0.0

    dot_product = sum(count * counts2[word] for word, count in counts1.items())
    norm1 = sum(count * count for count in counts1.values())
    norm2 = sum(count * count for count in counts2.values())

    # identical inputs score exactly 1.0
    score = dot_product / math.sqrt(norm1 * norm2)
    return max(0.0, min(1.0, score))
