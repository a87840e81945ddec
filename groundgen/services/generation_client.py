"""
Grounded generation client: Gemini generateContent with retry and source extraction.

One public operation, generate(). Transient failures (429, 5xx, transport
errors) are retried internally with exponential backoff plus jitter; callers
only ever see a GenerationResult or one terminal GenerationError.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from groundgen.core.config import ClientConfig
from groundgen.core.errors import ErrorKind, GenerationError
from groundgen.services.generation_types import GenerationRequest, GenerationResult
from groundgen.services.response_parser import build_payload, parse_response
from groundgen.services.retry_policy import RetryPolicy, StatusClass, classify_status, exponential_backoff

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def _response_body(response: httpx.Response) -> Any:
    """JSON body when it decodes, raw text otherwise."""
    try:
        return response.json()
    except ValueError:
        return response.text


class GroundedGenerationClient:
    """
    Calls the configured generateContent endpoint.

    http_client: optional shared httpx.AsyncClient (pooling is the caller's
    concern; an injected client is never closed here). Without one, each
    call opens and closes its own.
    sleep: awaitable used between attempts; defaults to asyncio.sleep.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._config = config
        self._retry_policy = retry_policy or RetryPolicy(
            max_attempts=config.max_attempts,
            backoff=exponential_backoff(config.base_delay, config.max_jitter),
        )
        self._http_client = http_client
        self._sleep = sleep

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def generate(
        self,
        request: GenerationRequest,
        cancel: asyncio.Event | None = None,
    ) -> GenerationResult:
        """
        Generate text for the request. Raises GenerationError on every terminal failure:
        INVALID_REQUEST before any network access when user_prompt is empty.
        """
        if not request.user_prompt or not request.user_prompt.strip():
            raise GenerationError(ErrorKind.INVALID_REQUEST, "Missing userPrompt in request.")

        payload = build_payload(request)
        logger.info(
            "[generation:generate] IN  prompt_len=%d system=%s search=%s model=%s",
            len(request.user_prompt),
            bool(request.system_prompt),
            request.enable_search_grounding,
            self._config.model,
        )
        logger.debug("[generation:generate] prompt_sample=%r", request.user_prompt[:500])

        if self._http_client is not None:
            return await self._run_attempts(self._http_client, payload, cancel)
        async with httpx.AsyncClient(timeout=self._config.timeout) as http_client:
            return await self._run_attempts(http_client, payload, cancel)

    async def _run_attempts(
        self,
        http_client: httpx.AsyncClient,
        payload: dict[str, Any],
        cancel: asyncio.Event | None,
    ) -> GenerationResult:
        headers = {"Content-Type": "application/json", "x-goog-api-key": self._config.api_key}
        state = self._retry_policy.start()

        while True:
            if cancel is not None and cancel.is_set():
                raise GenerationError(ErrorKind.CANCELLED, "Generation was cancelled.")

            try:
                response = await self._until_cancelled(
                    http_client.post(self._config.endpoint, json=payload, headers=headers),
                    cancel,
                )
            except httpx.RequestError as e:
                if state.is_last_attempt:
                    logger.error(
                        "[generation:generate] transport failure after %d attempts: %s",
                        state.attempt_number,
                        e,
                    )
                    raise GenerationError(
                        ErrorKind.TRANSPORT_FAILURE,
                        "Failed to connect to the Gemini API after multiple retries.",
                        cause=e,
                    ) from e
                logger.warning(
                    "[generation:generate] attempt %d/%d: %s, retrying",
                    state.attempt_number,
                    state.max_attempts,
                    type(e).__name__,
                )
            else:
                status_class = classify_status(response.status_code)
                if status_class is StatusClass.SUCCESS:
                    return parse_response(_response_body(response), status_code=response.status_code)

                body = _response_body(response)
                if status_class is StatusClass.TERMINAL:
                    logger.error(
                        "[generation:generate] non-retryable status %d body=%r",
                        response.status_code,
                        body,
                    )
                    raise GenerationError(
                        ErrorKind.UPSTREAM_REJECTED,
                        f"API call failed with status {response.status_code}",
                        status_code=response.status_code,
                        body=body,
                    )
                if state.is_last_attempt:
                    logger.error(
                        "[generation:generate] status %d on final attempt %d body=%r",
                        response.status_code,
                        state.attempt_number,
                        body,
                    )
                    raise GenerationError(
                        ErrorKind.RETRIES_EXHAUSTED,
                        "All API attempts failed.",
                        status_code=response.status_code,
                        body=body,
                    )
                logger.warning(
                    "[generation:generate] attempt %d/%d: status %d, retrying",
                    state.attempt_number,
                    state.max_attempts,
                    response.status_code,
                )

            delay = self._retry_policy.delay_for(state)
            logger.info("[generation:generate] backoff %.2fs before attempt %d", delay, state.attempt_number + 1)
            await self._until_cancelled(self._sleep(delay), cancel)
            state = state.advance()

    async def _until_cancelled(self, awaitable: Awaitable[Any], cancel: asyncio.Event | None) -> Any:
        """Await awaitable; if cancel fires first, abort it and raise CANCELLED."""
        if cancel is None:
            return await awaitable

        work = asyncio.ensure_future(awaitable)
        watcher = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            work.cancel()
            watcher.cancel()
            raise

        if work in done:
            watcher.cancel()
            return work.result()

        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        logger.info("[generation:generate] cancelled by caller")
        raise GenerationError(ErrorKind.CANCELLED, "Generation was cancelled.")
