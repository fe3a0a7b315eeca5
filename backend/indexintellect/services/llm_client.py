"""Factory and single-call helper for the generative text API."""
from __future__ import annotations

import logging
from typing import Any, Dict

import openai

from indexintellect.core.config import settings
from indexintellect.core.errors import ConfigurationError, TransportError, UpstreamError

logger = logging.getLogger(__name__)


def get_llm_client() -> openai.OpenAI:
    """Return an OpenAI-compatible client pointed at the configured endpoint."""
    if settings.llm_api_key is None or not settings.llm_api_key.get_secret_value():
        raise ConfigurationError()
    return openai.OpenAI(
        api_key=settings.llm_api_key.get_secret_value(),
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout_seconds,
        max_retries=1,
    )


def request_json_completion(system_prompt: str, user_prompt: str) -> Dict[str, Any]:
    """
    Run one JSON-mode chat completion and return the raw response as a dict.

    The response is handed back undigested so the extractor can cope with
    whichever envelope the provider produced.
    """
    client = get_llm_client()
    try:
        completion = client.chat.completions.create(
            model=settings.llm_model,
            response_format={"type": "json_object"},
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_output_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
    except openai.APIStatusError as exc:
        logger.error("Generative API returned status %s: %s", exc.status_code, exc.message)
        raise UpstreamError() from exc
    except openai.APIConnectionError as exc:
        logger.error("Could not reach generative API: %s", exc)
        raise TransportError("Could not reach the generative API") from exc

    return completion.model_dump()
