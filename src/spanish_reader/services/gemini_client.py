"""Shared Gemini request handling - retries and error classification."""

import asyncio
import logging
from typing import Any, Optional, Tuple

import google.genai as genai
from google.genai import types

logger = logging.getLogger(__name__)


def is_rate_limit_error(error_msg: str) -> bool:
    return (
        "429" in error_msg
        or "resource_exhausted" in error_msg
        or "quota" in error_msg
        or "rate_limit" in error_msg
    )


def describe_error(exc: Exception, action: str) -> str:
    """Turn an API exception into a message fit for the learner."""
    error_msg = str(exc).lower()
    if "api_key" in error_msg or "authentication" in error_msg or "invalid" in error_msg:
        return f"Invalid API key or request: {exc}"
    if is_rate_limit_error(error_msg):
        return "API quota exceeded. Please try again later."
    if "deadline" in error_msg or "timeout" in error_msg:
        return "Request timed out. Please check your connection."
    return f"{action} failed: {exc}"


async def generate_with_retries(
    api_key: str,
    model: str,
    contents: Any,
    config: types.GenerateContentConfig,
    action: str,
    max_retries: int = 3,
    retry_delay: float = 2.0,
) -> Tuple[Optional[types.GenerateContentResponse], Optional[str]]:
    """Call ``generate_content`` and retry rate-limit errors with exponential backoff.

    Returns:
        ``(response, None)`` on success, ``(None, error_message)`` otherwise.
    """
    client = genai.Client(api_key=api_key)
    attempt = 0
    while attempt < max_retries:
        attempt += 1
        try:
            logger.debug("%s request: model=%s attempt=%d/%d", action, model, attempt, max_retries)
            response = await client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            )
            logger.debug("%s response received on attempt %d", action, attempt)
            return response, None
        except Exception as exc:
            error_msg = str(exc).lower()
            if is_rate_limit_error(error_msg) and attempt < max_retries:
                logger.warning("%s rate limited, retrying in %.0fs", action, retry_delay)
                await asyncio.sleep(retry_delay)
                retry_delay *= 2
                continue
            logger.error("%s failed (%s): %s", action, type(exc).__name__, exc)
            return None, describe_error(exc, action)
    return None, f"{action} failed after {max_retries} attempts"
