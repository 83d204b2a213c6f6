"""Retry logic for LLM formatting errors.

Retries only on JSON parse or schema validation failures.
Does NOT retry on adapter transport errors; those propagate to the caller.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel

from llm_verification.adapter import BaseLLMAdapter
from llm_verification.validator import LLMOutputValidationError, validate_llm_output

logger = logging.getLogger(__name__)

_RETRYABLE_STAGES = frozenset({"json_parse", "schema"})

OutputModel = TypeVar("OutputModel", bound=BaseModel)


class LLMRetryExhaustedError(Exception):
    """Raised when all retry attempts fail validation.

    Attributes:
        attempts: Total number of attempts made (initial + retries).
        last_error: The validation error from the final attempt.
        history: Validation errors from every failed attempt.
    """

    def __init__(
        self,
        attempts: int,
        last_error: LLMOutputValidationError,
        history: List[LLMOutputValidationError],
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.history = history
        super().__init__(
            f"LLM output validation failed after {attempts} attempt(s). "
            f"Last error: {last_error}"
        )


async def generate_with_retry(
    adapter: BaseLLMAdapter,
    *,
    output_model: Type[OutputModel],
    system: Optional[str],
    prompt: str,
    schema_name: str,
    response_schema: Dict[str, Any],
    temperature: float,
    max_tokens: int,
    max_retries: int = 2,
) -> OutputModel:
    """Generate LLM output with retry on formatting errors.

    Args:
        adapter: An LLM adapter implementing ``generate``.
        output_model: Pydantic contract the response must satisfy.
        system: Optional system message.
        prompt: The fully formatted user prompt.
        schema_name: Name of the structured output schema.
        response_schema: JSON schema sent with the request.
        temperature: Sampling temperature.
        max_tokens: Maximum tokens in the completion.
        max_retries: Maximum number of *additional* attempts after the
            first failure. Total attempts = 1 + max_retries.

    Returns:
        A validated ``output_model`` instance.

    Raises:
        LLMOutputValidationError: If a non-retryable validation error occurs.
        LLMRetryExhaustedError: If all attempts fail with retryable errors.
    """
    errors: List[LLMOutputValidationError] = []
    total_attempts = 1 + max(max_retries, 0)

    for attempt in range(1, total_attempts + 1):
        raw = await adapter.generate(
            system=system,
            prompt=prompt,
            schema_name=schema_name,
            response_schema=response_schema,
            temperature=temperature,
            max_tokens=max_tokens,
        )

        try:
            result = validate_llm_output(raw, output_model)
            if attempt > 1:
                logger.info(
                    "LLM output validated on attempt %d/%d",
                    attempt,
                    total_attempts,
                )
            return result

        except LLMOutputValidationError as exc:
            if exc.stage not in _RETRYABLE_STAGES:
                raise

            errors.append(exc)
            logger.warning(
                "Attempt %d/%d failed at stage '%s': %s",
                attempt,
                total_attempts,
                exc.stage,
                "; ".join(exc.errors),
            )

    raise LLMRetryExhaustedError(
        attempts=total_attempts,
        last_error=errors[-1],
        history=errors,
    )
