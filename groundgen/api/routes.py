"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import logging

from fastapi import APIRouter, Depends

from groundgen.api.handlers import (
    get_generation_client,
    handle_generate,
    handle_product_lookup,
    handle_review_analysis,
)
from groundgen.schemas.generation import GenerateRequest, GenerateResponse, ProductLookupRequest
from groundgen.schemas.review import ReviewAnalysisRequest, ReviewAnalysisResponse
from groundgen.services.generation_client import GroundedGenerationClient

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Grounded generation proxy running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Generation ---

@router.post(
    "/generate",
    response_model=GenerateResponse,
    tags=["generation"],
    summary="Generate text, optionally grounded in web search",
    description="Proxy to the Gemini API with retry. 400 on empty prompt, 502/503/504 on upstream failure, 503 when the API key is not configured.",
)
async def post_generate(
    body: GenerateRequest,
    client: GroundedGenerationClient = Depends(get_generation_client),
) -> GenerateResponse:
    logger.info("[api:post_generate] IN  prompt_len=%d search=%s", len(body.user_prompt), body.use_search)
    return await handle_generate(body, client)


# --- Reviews ---

@router.post(
    "/products/lookup",
    response_model=GenerateResponse,
    tags=["reviews"],
    summary="Look up a product before reviewing it",
    description="Grounded description and approximate market price for a product name.",
)
async def post_product_lookup(
    body: ProductLookupRequest,
    client: GroundedGenerationClient = Depends(get_generation_client),
) -> GenerateResponse:
    logger.info("[api:post_product_lookup] IN  product=%r", body.product_query)
    return await handle_product_lookup(body, client)


@router.post(
    "/reviews/analyze",
    response_model=ReviewAnalysisResponse,
    tags=["reviews"],
    summary="Analyze a review's sentiment",
    description="Returns sentiment (Positive/Neutral/Negative), a 0-5 rating, and a key insight. 502 when the model reply is unusable.",
)
async def post_review_analysis(
    body: ReviewAnalysisRequest,
    client: GroundedGenerationClient = Depends(get_generation_client),
) -> ReviewAnalysisResponse:
    logger.info("[api:post_review_analysis] IN  review_len=%d", len(body.review_text))
    return await handle_review_analysis(body, client)
