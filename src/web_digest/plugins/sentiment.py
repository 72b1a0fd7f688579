"""
Lexicon-based sentiment scoring.

Counts positive and negative words, flipping a word's polarity when one of
the two preceding words is a negation.
"""

import re

from web_digest.core.models import PageMetadata
from web_digest.plugins.base import PluginResult

WORD_PATTERN = re.compile(r"[a-z']+")

POSITIVE_WORDS = frozenset({
    "good", "great", "excellent", "amazing", "awesome", "best", "better",
    "benefit", "benefits", "happy", "love", "loved", "positive", "success",
    "successful", "improve", "improved", "improvement", "effective", "easy",
    "helpful", "innovative", "reliable", "strong", "win", "wins", "growth",
    "gain", "gains", "favorable", "efficient", "secure", "robust", "useful",
})

NEGATIVE_WORDS = frozenset({
    "bad", "poor", "terrible", "awful", "worst", "worse", "fail", "failed",
    "failure", "problem", "problems", "risk", "risks", "negative", "loss",
    "losses", "difficult", "hard", "broken", "bug", "bugs", "crisis",
    "decline", "weak", "harm", "harmful", "slow", "error", "errors",
    "threat", "unsafe", "unreliable", "concern", "concerns",
})

NEGATIONS = frozenset({"not", "no", "never", "without", "hardly", "isn't", "wasn't", "don't", "doesn't"})

# |score| below this is neutral
NEUTRAL_BAND = 0.05


class SentimentPlugin:
    name = "sentiment"
    description = "Positive/negative tone from a word lexicon"

    def score(self, content: str) -> tuple[float, int, int]:
        """Return (score in [-1, 1], positive hits, negative hits)."""
        words = WORD_PATTERN.findall(content.lower())
        positive = negative = 0

        for i, word in enumerate(words):
            if word in POSITIVE_WORDS:
                polarity = 1
            elif word in NEGATIVE_WORDS:
                polarity = -1
            else:
                continue

            if any(w in NEGATIONS for w in words[max(0, i - 2):i]):
                polarity = -polarity

            if polarity > 0:
                positive += 1
            else:
                negative += 1

        hits = positive + negative
        if hits == 0:
            return 0.0, 0, 0
        return (positive - negative) / hits, positive, negative

    async def process(self, content: str, metadata: PageMetadata) -> PluginResult:
        score, positive, negative = self.score(content)
        if score > NEUTRAL_BAND:
            label = "positive"
        elif score < -NEUTRAL_BAND:
            label = "negative"
        else:
            label = "neutral"

        return PluginResult(
            analysis={
                "score": round(score, 3),
                "label": label,
                "positive": positive,
                "negative": negative,
            },
            tags=[f"sentiment:{label}"],
        )
