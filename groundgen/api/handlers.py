"""
API handlers: build service inputs from request schemas, call services, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP mapping.
Lives in the API layer so services stay free of FastAPI/HTTP types. Raw upstream
bodies are logged here and never returned to the caller.
"""

import logging
from functools import lru_cache

from fastapi import HTTPException

from groundgen.core.config import load_client_config
from groundgen.core.errors import ErrorKind, GenerationError
from groundgen.schemas.generation import GenerateRequest, GenerateResponse, ProductLookupRequest, SourceOut
from groundgen.schemas.review import ReviewAnalysisRequest, ReviewAnalysisResponse
from groundgen.services.generation_client import GroundedGenerationClient
from groundgen.services.generation_types import GenerationRequest, GenerationResult
from groundgen.services.review_service import ReviewAnalysisError, analyze_review, lookup_product

logger = logging.getLogger(__name__)

# kind -> (HTTP status, message shown to end users)
ERROR_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.INVALID_REQUEST: (400, "Please enter a prompt before submitting."),
    ErrorKind.UPSTREAM_REJECTED: (502, "The generation service rejected the request."),
    ErrorKind.RETRIES_EXHAUSTED: (503, "The generation service is busy. Please try again shortly."),
    ErrorKind.TRANSPORT_FAILURE: (504, "Could not reach the generation service."),
    ErrorKind.EMPTY_GENERATION: (502, "The generation service returned no content."),
    ErrorKind.CANCELLED: (503, "The request was cancelled."),
}


@lru_cache(maxsize=1)
def get_generation_client() -> GroundedGenerationClient:
    """FastAPI dependency. Raises ServiceUnavailableError (-> 503) when the API key is missing."""
    return GroundedGenerationClient(load_client_config())


def generation_error_to_http(e: GenerationError) -> HTTPException:
    status_code, message = ERROR_RESPONSES[e.kind]
    logger.warning(
        "[api:generation_error] kind=%s upstream_status=%s message=%s body=%r",
        e.kind.value,
        e.status_code,
        e.message,
        e.body,
    )
    return HTTPException(status_code=status_code, detail={"message": message, "kind": e.kind.value})


def _to_response(result: GenerationResult) -> GenerateResponse:
    return GenerateResponse(
        text=result.text,
        sources=[SourceOut(uri=s.uri, title=s.title) for s in result.sources],
    )


async def handle_generate(body: GenerateRequest, client: GroundedGenerationClient) -> GenerateResponse:
    request = GenerationRequest(
        user_prompt=body.user_prompt,
        system_prompt=body.system_prompt or None,
        enable_search_grounding=body.use_search,
    )
    try:
        result = await client.generate(request)
    except GenerationError as e:
        raise generation_error_to_http(e) from e
    return _to_response(result)


async def handle_product_lookup(body: ProductLookupRequest, client: GroundedGenerationClient) -> GenerateResponse:
    try:
        result = await lookup_product(client, body.product_query)
    except GenerationError as e:
        raise generation_error_to_http(e) from e
    return _to_response(result)


async def handle_review_analysis(body: ReviewAnalysisRequest, client: GroundedGenerationClient) -> ReviewAnalysisResponse:
    try:
        analysis = await analyze_review(client, body.review_text)
    except GenerationError as e:
        raise generation_error_to_http(e) from e
    except ReviewAnalysisError as e:
        raise HTTPException(status_code=502, detail={"message": e.message, "kind": "analysis_incomplete"}) from e
    return ReviewAnalysisResponse(
        sentiment=analysis.sentiment,
        rating=analysis.rating,
        key_insight=analysis.key_insight,
    )
