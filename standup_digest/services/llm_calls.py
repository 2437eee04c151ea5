# llm_calls.py
"""Bounded retry around a single LLM completion call."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from standup_digest.core import LLMInterface
from standup_digest.core.exceptions import AIRequestFailed, LLMProviderError

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = (429, 529)

Sleep = Callable[[float], Awaitable[None]]


async def complete_with_retry(
    llm: LLMInterface,
    prompt: str,
    max_tokens: int,
    system_prompt: Optional[str] = None,
    max_retries: int = 2,
    retry_delay: float = 2.0,
    sleep: Sleep = asyncio.sleep,
) -> str:
    """Call ``llm.complete``, retrying rate-limited and overloaded responses.

    Attempt ``n`` (1-based retry count) waits ``n * retry_delay`` seconds, so
    with the defaults a call is tried at most three times. Any other failure,
    from the provider or not, ends the loop at once.

    Raises:
        AIRequestFailed: the call failed or every attempt was throttled.
    """
    attempt = 0
    while True:
        try:
            return await llm.complete(prompt, max_tokens, system_prompt=system_prompt)
        except LLMProviderError as e:
            if e.status_code not in RETRYABLE_STATUSES:
                raise AIRequestFailed(str(e)) from e
            if attempt >= max_retries:
                raise AIRequestFailed(f"{e} (gave up after {attempt + 1} attempts)") from e

            attempt += 1
            delay = attempt * retry_delay
            logger.warning(
                f"AI call returned {e.status_code}, retrying in {delay:.1f}s "
                f"(retry {attempt}/{max_retries})"
            )
            await sleep(delay)
        except Exception as e:
            raise AIRequestFailed(f"AI call failed: {type(e).__name__}: {e}") from e
