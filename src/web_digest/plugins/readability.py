"""Flesch reading-ease scoring."""

import re

from web_digest.core.models import PageMetadata
from web_digest.plugins.base import PluginResult

SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+|[^.!?]+$")
WORD_PATTERN = re.compile(r"[A-Za-z]+")
VOWEL_GROUP = re.compile(r"[aeiouy]+")

# (minimum score, label), highest first
READING_LEVELS = (
    (90.0, "very easy"),
    (70.0, "easy"),
    (60.0, "standard"),
    (50.0, "fairly difficult"),
    (30.0, "difficult"),
)


def count_syllables(word: str) -> int:
    """Vowel-group estimate; at least one syllable per word."""
    word = word.lower()
    count = len(VOWEL_GROUP.findall(word))
    if word.endswith("e") and not word.endswith("le") and count > 1:
        count -= 1
    return max(1, count)


def flesch_reading_ease(text: str) -> float | None:
    """Flesch reading-ease score, None for text without words."""
    words = WORD_PATTERN.findall(text)
    if not words:
        return None

    sentences = [s for s in SENTENCE_PATTERN.findall(text) if WORD_PATTERN.search(s)]
    sentence_count = max(1, len(sentences))
    syllables = sum(count_syllables(w) for w in words)

    return (
        206.835
        - 1.015 * (len(words) / sentence_count)
        - 84.6 * (syllables / len(words))
    )


def reading_level(score: float) -> str:
    for minimum, label in READING_LEVELS:
        if score >= minimum:
            return label
    return "very difficult"


class ReadabilityPlugin:
    name = "readability"
    description = "Flesch reading-ease score and level"

    async def process(self, content: str, metadata: PageMetadata) -> PluginResult:
        score = flesch_reading_ease(content)
        if score is None:
            return PluginResult(analysis={"score": None, "level": None, "words": 0})

        level = reading_level(score)
        return PluginResult(
            analysis={
                "score": round(score, 1),
                "level": level,
                "words": len(WORD_PATTERN.findall(content)),
            },
            tags=[f"readability:{level.replace(' ', '-')}"],
        )
