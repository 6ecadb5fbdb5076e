"""Thin wrapper around the Anthropic SDK for story generation calls."""

from __future__ import annotations

import logging

import anthropic

from gridiron_edge.config import Settings, get_settings
from gridiron_edge.errors import ErrorCode, GeneratorError

logger = logging.getLogger(__name__)


async def ask_model(
    system: str,
    user: str,
    max_tokens: int | None = None,
    settings: Settings | None = None,
    timeout: float | None = None,
) -> str:
    """Send a prompt to the configured Claude model and return the text response.

    SDK failures are mapped onto GeneratorError codes; timeouts, network
    errors, rate limits and 5xx responses are recoverable.
    """
    settings = settings or get_settings()
    limits = settings.limits
    try:
        async with anthropic.AsyncAnthropic(
            api_key=settings.anthropic_api_key,
            timeout=timeout if timeout is not None else limits.timeout_seconds,
            max_retries=0,
        ) as client:
            message = await client.messages.create(
                model=settings.llm_model,
                max_tokens=max_tokens or limits.max_output_tokens,
                temperature=settings.llm_temperature,
                system=system,
                messages=[{"role": "user", "content": user}],
            )
    except anthropic.APITimeoutError as exc:
        logger.warning("Model call timed out: %s", exc)
        raise GeneratorError(ErrorCode.WRAPPER_TIMEOUT, "Model call timed out") from exc
    except anthropic.APIConnectionError as exc:
        logger.warning("Model call failed to connect: %s", exc)
        raise GeneratorError(ErrorCode.NETWORK_ERROR, "Could not reach model API") from exc
    except anthropic.APIStatusError as exc:
        retryable = exc.status_code == 429 or exc.status_code >= 500
        logger.warning("Model API returned HTTP %d", exc.status_code)
        raise GeneratorError(
            ErrorCode.MODEL_ERROR,
            f"Model API error (HTTP {exc.status_code})",
            {"status_code": exc.status_code},
            recoverable=retryable,
        ) from exc

    texts = [block.text for block in message.content if getattr(block, "type", "") == "text"]
    if not texts:
        raise GeneratorError(ErrorCode.BAD_WRAPPER_RESPONSE, "Model returned empty content")
    return "".join(texts)
