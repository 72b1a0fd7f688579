"""Keyword extraction by term frequency."""

import re
from collections import Counter

from web_digest.core.models import PageMetadata
from web_digest.plugins.base import PluginResult

WORD_PATTERN = re.compile(r"[a-zA-Z][a-zA-Z'-]+")

STOP_WORDS = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "to", "of", "in",
    "for", "on", "with", "at", "by", "from", "as", "into", "through",
    "during", "before", "after", "above", "below", "between", "under",
    "again", "further", "then", "once", "here", "there", "when", "where",
    "why", "how", "all", "each", "few", "more", "most", "other", "some",
    "such", "no", "nor", "not", "only", "own", "same", "so", "than", "too",
    "very", "just", "and", "but", "if", "or", "because", "until", "while",
    "about", "against", "what", "which", "who", "whom", "this", "that",
    "these", "those", "am", "i", "me", "my", "we", "our", "ours", "you",
    "your", "yours", "he", "him", "his", "she", "her", "hers", "it", "its",
    "they", "them", "their", "theirs", "any", "both", "also", "new", "one",
    "like", "many", "much", "over", "out", "up", "down", "off",
})


class KeywordsPlugin:
    """Most frequent non-stop-words of the page; the top ones become tags."""

    name = "keywords"
    description = "Most frequent significant terms"

    def __init__(self, top_n: int = 10, tag_count: int = 3, min_length: int = 3) -> None:
        self.top_n = top_n
        self.tag_count = tag_count
        self.min_length = min_length

    def extract(self, content: str) -> list[tuple[str, int]]:
        words = (w.lower().strip("'-") for w in WORD_PATTERN.findall(content))
        counts = Counter(
            w for w in words
            if len(w) >= self.min_length and w not in STOP_WORDS
        )
        return counts.most_common(self.top_n)

    async def process(self, content: str, metadata: PageMetadata) -> PluginResult:
        keywords = self.extract(content)
        return PluginResult(
            analysis={"keywords": [{"term": t, "count": c} for t, c in keywords]},
            tags=[t for t, _ in keywords[: self.tag_count]],
        )
