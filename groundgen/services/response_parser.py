"""
Gemini generateContent payload building and response extraction.

Responsibility: Turn a GenerationRequest into the outbound JSON body, and turn
a successful (2xx) response body into a GenerationResult. Missing or malformed
fields are handled defensively; a body without usable text is an error, never
an empty success.
"""

import logging
from typing import Any

from groundgen.core.errors import ErrorKind, GenerationError
from groundgen.services.generation_types import GenerationRequest, GenerationResult, Source

logger = logging.getLogger(__name__)

SEARCH_TOOL = {"google_search": {}}


def build_payload(request: GenerationRequest) -> dict[str, Any]:
    """Build the generateContent body; systemInstruction and tools only when asked for."""
    payload: dict[str, Any] = {
        "contents": [{"parts": [{"text": request.user_prompt}]}],
    }
    if request.system_prompt:
        payload["systemInstruction"] = {"parts": [{"text": request.system_prompt}]}
    if request.enable_search_grounding:
        payload["tools"] = [dict(SEARCH_TOOL)]
    return payload


def _first_text(candidate: dict[str, Any]) -> str | None:
    content = candidate.get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list):
        return None
    for part in parts:
        if isinstance(part, dict):
            text = part.get("text")
            if isinstance(text, str) and text:
                return text
    return None


def extract_sources(candidate: dict[str, Any]) -> tuple[Source, ...]:
    """
    Map grounding attributions to Sources, keeping upstream order.

    Reads groundingAttributions; falls back to groundingChunks (the shape newer
    API versions return). Entries without both a uri and a title are dropped.
    """
    metadata = candidate.get("groundingMetadata")
    if not isinstance(metadata, dict):
        return ()
    entries = metadata.get("groundingAttributions")
    if entries is None:
        entries = metadata.get("groundingChunks")
    if not isinstance(entries, list):
        return ()

    sources: list[Source] = []
    for entry in entries:
        web = entry.get("web") if isinstance(entry, dict) else None
        if not isinstance(web, dict):
            continue
        uri = web.get("uri")
        title = web.get("title")
        if isinstance(uri, str) and uri and isinstance(title, str) and title:
            sources.append(Source(uri=uri, title=title))
    dropped = len(entries) - len(sources)
    if dropped:
        logger.debug("[parser:extract_sources] dropped=%d incomplete attributions", dropped)
    return tuple(sources)


def parse_response(body: Any, status_code: int = 200) -> GenerationResult:
    """
    Extract text and sources from a 2xx response body.

    Raises GenerationError(UPSTREAM_REJECTED) when the body carries an error
    field, and GenerationError(EMPTY_GENERATION) when there is no candidate text.
    """
    if not isinstance(body, dict):
        raise GenerationError(
            ErrorKind.EMPTY_GENERATION,
            "Generated content was empty or malformed.",
            status_code=status_code,
            body=body,
        )

    if body.get("error") is not None:
        raise GenerationError(
            ErrorKind.UPSTREAM_REJECTED,
            "Upstream returned an error in a successful response.",
            status_code=status_code,
            body=body,
        )

    candidates = body.get("candidates")
    first = candidates[0] if isinstance(candidates, list) and candidates else None
    text = _first_text(first) if isinstance(first, dict) else None
    if text is None:
        raise GenerationError(
            ErrorKind.EMPTY_GENERATION,
            "Generated content was empty or malformed.",
            status_code=status_code,
            body=body,
        )

    sources = extract_sources(first)
    logger.info("[parser:parse_response] OUT text_len=%d sources=%d", len(text), len(sources))
    return GenerationResult(text=text, sources=sources)
