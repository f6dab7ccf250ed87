"""Factory function for creating LLM clients from configuration."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from tandem.llm.openai_compat import OpenAICompatibleClient

if TYPE_CHECKING:
    from tandem.config.schema import TandemConfig

logger = logging.getLogger(__name__)

TONGYI_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"


def create_llm_client(config: TandemConfig, model: str | None = None) -> OpenAICompatibleClient:
    """Create an LLM client based on configuration.

    Reads ``config.provider.provider`` and resolves the endpoint for it.
    This is the only place that branches on provider identity.

    Args:
        config: Tandem configuration.
        model: Model name override (e.g. the planner or executor model).

    Returns:
        An LLM client for the configured provider.

    Raises:
        ValueError: If the provider is not recognised or lacks a base URL.
    """
    provider = config.provider.provider
    api_key = os.environ.get(config.provider.api_key_env) or "none"

    if provider == "openai":
        base_url = config.provider.base_url
    elif provider == "tongyi":
        base_url = config.provider.base_url or TONGYI_BASE_URL
    elif provider == "openai-compatible":
        if not config.provider.base_url:
            raise ValueError("Provider 'openai-compatible' requires provider.base_url")
        base_url = config.provider.base_url
    else:
        raise ValueError(f"Unknown provider: {provider}")

    if api_key == "none":
        logger.debug("Environment variable %s is not set", config.provider.api_key_env)

    return OpenAICompatibleClient(
        model=model or config.model.name,
        base_url=base_url,
        api_key=api_key,
        timeout=config.provider.timeout,
        temperature=config.model.temperature,
    )
