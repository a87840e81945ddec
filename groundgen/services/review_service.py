"""
Review flow on top of the generation client: product lookup and review analysis.

Responsibility: Build the prompts the review form needs and interpret the
replies. Called by the API; no HTTP types here.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from groundgen.core.errors import ErrorKind, GenerationError
from groundgen.services.generation_client import GroundedGenerationClient
from groundgen.services.generation_types import GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)

SENTIMENTS = ("Positive", "Neutral", "Negative")
MAX_RATING = 5

PRODUCT_PROMPT = "What is the {product}? Provide a brief description and an approximate market price."

ANALYSIS_SYSTEM_PROMPT = (
    "You analyze customer product reviews. Reply with a single JSON object and nothing else, "
    'shaped like {"sentiment": "Positive" | "Neutral" | "Negative", '
    '"rating": integer 1-5, "keyInsight": one short sentence}.'
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class ReviewAnalysisError(Exception):
    """Raised when the model's analysis reply is missing or unusable."""

    def __init__(self, message: str, reply: str = "") -> None:
        self.message = message
        self.reply = reply
        super().__init__(message)


@dataclass(frozen=True)
class ReviewAnalysis:
    """Sentiment bucket, 0-5 rating (0 when unknown), and a one-line insight."""

    sentiment: str
    rating: int
    key_insight: str


async def lookup_product(client: GroundedGenerationClient, product_query: str) -> GenerationResult:
    """Grounded description and approximate price for a product name."""
    product = (product_query or "").strip()
    if not product:
        raise GenerationError(ErrorKind.INVALID_REQUEST, "Missing productQuery in request.")
    logger.info("[review:lookup_product] IN  product=%r", product)
    request = GenerationRequest(
        user_prompt=PRODUCT_PROMPT.format(product=product),
        enable_search_grounding=True,
    )
    result = await client.generate(request)
    logger.info("[review:lookup_product] OUT text_len=%d sources=%d", len(result.text), len(result.sources))
    return result


def _normalize_sentiment(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip().lower()
    for sentiment in SENTIMENTS:
        if cleaned == sentiment.lower():
            return sentiment
    return None


def _normalize_rating(value: Any) -> int:
    try:
        rating = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, min(MAX_RATING, rating))


def parse_analysis(reply: str) -> ReviewAnalysis:
    """
    Parse the model's JSON reply (code fences tolerated).
    Raises ReviewAnalysisError when it is not JSON or has no recognisable sentiment.
    """
    text = (reply or "").strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReviewAnalysisError("AI analysis incomplete.", reply) from e
    if not isinstance(data, dict):
        raise ReviewAnalysisError("AI analysis incomplete.", reply)

    sentiment = _normalize_sentiment(data.get("sentiment"))
    if sentiment is None:
        raise ReviewAnalysisError("AI analysis incomplete.", reply)

    insight = data.get("keyInsight")
    key_insight = insight.strip() if isinstance(insight, str) and insight.strip() else "N/A"
    return ReviewAnalysis(
        sentiment=sentiment,
        rating=_normalize_rating(data.get("rating")),
        key_insight=key_insight,
    )


async def analyze_review(client: GroundedGenerationClient, review_text: str) -> ReviewAnalysis:
    """Ask the model for sentiment, rating, and key insight of one review."""
    text = (review_text or "").strip()
    if not text:
        raise GenerationError(ErrorKind.INVALID_REQUEST, "Missing reviewText in request.")
    logger.info("[review:analyze_review] IN  review_len=%d", len(text))
    request = GenerationRequest(user_prompt=text, system_prompt=ANALYSIS_SYSTEM_PROMPT)
    result = await client.generate(request)
    try:
        analysis = parse_analysis(result.text)
    except ReviewAnalysisError:
        logger.warning("[review:analyze_review] unusable reply=%r", result.text[:500])
        raise
    logger.info("[review:analyze_review] OUT sentiment=%s rating=%d", analysis.sentiment, analysis.rating)
    return analysis
