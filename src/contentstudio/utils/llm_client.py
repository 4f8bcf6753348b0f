"""LLM client with Instructor integration for structured responses.

Wraps the OpenAI API with Instructor so every call returns a validated
Pydantic model. Calls are retried with exponential backoff and token usage is
accumulated per client for cost reporting.
"""

import hashlib
import logging
import time
from typing import Dict, Optional, Type, TypeVar

import instructor
from openai import OpenAI
from pydantic import BaseModel

from contentstudio.constants import LLM_MODEL

T = TypeVar("T", bound=BaseModel)

logger = logging.getLogger(__name__)

# USD per 1M tokens
MODEL_COSTS = {
    "gpt-4o": {"input": 2.5, "output": 10, "cached": 1.25},
    "gpt-4o-mini": {"input": 0.15, "output": 0.6, "cached": 0.075},
    "gpt-4.1-mini": {"input": 0.4, "output": 1.6, "cached": 0.1},
}


class TokenUsage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    cached_tokens: int = 0

    def add(self, other: "TokenUsage") -> None:
        self.prompt_tokens += other.prompt_tokens
        self.completion_tokens += other.completion_tokens
        self.total_tokens += other.total_tokens
        self.cached_tokens += other.cached_tokens


class LLMClient:
    """Instructor-wrapped OpenAI client used by the language detector and quality judge.

    Features:
    - Structured response generation with Pydantic model validation
    - Per-call model override (quality checks always run on the larger model)
    - Retry with exponential backoff
    - Token usage tracking per model and cost estimation
    - Request logging by prompt hash (prompts themselves are not logged)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        timeout: Optional[float] = 60.0,
    ):
        """Initialize LLM client.

        Args:
            api_key: OpenAI API key (if None, uses OPENAI_API_KEY env var)
            model: Default model (if None, uses LLM_MODEL setting)
            max_retries: Maximum number of attempts per call (default: 3)
            base_delay: Base delay for exponential backoff in seconds (default: 1.0)
            max_delay: Maximum delay between retries in seconds (default: 30.0)
            timeout: Request timeout in seconds, enforced by the OpenAI SDK
        """
        self.model = model or LLM_MODEL
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

        self.usage_by_model: Dict[str, TokenUsage] = {}

        client = OpenAI(api_key=api_key, timeout=timeout)
        self.client = instructor.from_openai(client)

        logger.info(f"LLMClient initialized with model={self.model}, max_retries={max_retries}")

    def generate(
        self,
        prompt: str,
        response_model: Type[T],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> T:
        """Generate a structured response.

        Args:
            prompt: User prompt
            response_model: Pydantic model class for structured output
            system_prompt: Optional system prompt
            model: Model override for this call
            temperature: Sampling temperature (default: 0.3)
            max_tokens: Maximum tokens to generate (default: 1024)

        Returns:
            Validated Pydantic model instance

        Raises:
            RuntimeError: If all attempts fail
        """
        model_name = model or self.model
        prompt_hash = self._hash_prompt(prompt)
        logger.info(
            f"Generating structured response: model={model_name}, "
            f"response_model={response_model.__name__}, prompt_hash={prompt_hash}"
        )

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        last_exception: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            start_time = time.time()
            try:
                response = self.client.chat.completions.create(
                    model=model_name,
                    messages=messages,
                    response_model=response_model,
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
                latency_ms = (time.time() - start_time) * 1000

                usage = self._extract_usage(response)
                self.usage_by_model.setdefault(model_name, TokenUsage()).add(usage)

                logger.info(
                    f"LLM response: prompt_hash={prompt_hash}, model={model_name}, "
                    f"attempt={attempt}, latency_ms={latency_ms:.0f}, tokens={usage.total_tokens}"
                )
                return response

            except Exception as e:
                last_exception = e
                logger.warning(
                    f"Attempt {attempt}/{self.max_retries} failed for prompt_hash={prompt_hash}: {str(e)[:200]}"
                )
                if attempt < self.max_retries:
                    delay = self._calculate_backoff_delay(attempt)
                    logger.info(f"Retrying in {delay:.2f} seconds...")
                    time.sleep(delay)

        logger.error(f"All {self.max_retries} attempts failed for prompt_hash={prompt_hash}")
        raise RuntimeError(
            f"Failed to generate structured response after {self.max_retries} attempts. "
            f"Last error: {last_exception}"
        ) from last_exception

    def get_usage_summary(self) -> dict:
        """Summarize token usage and estimated cost across models."""
        total = TokenUsage()
        cost = 0.0
        for model_name, usage in self.usage_by_model.items():
            total.add(usage)
            rates = MODEL_COSTS.get(model_name, MODEL_COSTS["gpt-4o-mini"])
            uncached = usage.prompt_tokens - usage.cached_tokens
            cost += (
                uncached * rates["input"]
                + usage.cached_tokens * rates["cached"]
                + usage.completion_tokens * rates["output"]
            ) / 1_000_000

        return {
            "models": sorted(self.usage_by_model),
            "prompt_tokens": total.prompt_tokens,
            "completion_tokens": total.completion_tokens,
            "total_tokens": total.total_tokens,
            "cached_tokens": total.cached_tokens,
            "estimated_cost_usd": round(cost, 4),
        }

    def _extract_usage(self, response: BaseModel) -> TokenUsage:
        """Read usage from the raw completion Instructor attaches to the response."""
        usage = TokenUsage()
        raw_response = getattr(response, "_raw_response", None)
        raw_usage = getattr(raw_response, "usage", None)
        if raw_usage is None:
            return usage

        usage.prompt_tokens = getattr(raw_usage, "prompt_tokens", 0) or 0
        usage.completion_tokens = getattr(raw_usage, "completion_tokens", 0) or 0
        usage.total_tokens = getattr(raw_usage, "total_tokens", 0) or 0
        details = getattr(raw_usage, "prompt_tokens_details", None)
        if details is not None:
            usage.cached_tokens = getattr(details, "cached_tokens", 0) or 0
        return usage

    def _hash_prompt(self, prompt: str) -> str:
        return hashlib.sha256(prompt.encode()).hexdigest()[:16]

    def _calculate_backoff_delay(self, attempt: int) -> float:
        delay = self.base_delay * (2 ** (attempt - 1))
        return min(delay, self.max_delay)
