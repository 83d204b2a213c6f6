"""LLM-backed listing verification: schemas, adapters, prompts, validation."""

from llm_verification.adapter import BaseLLMAdapter, MockLLMAdapter, OpenAILLMAdapter
from llm_verification.classifier import LLMVerdictClassifier, VerdictClassifier
from llm_verification.prompt_builder import VerificationPromptBuilder
from llm_verification.retry import LLMRetryExhaustedError, generate_with_retry
from llm_verification.schema import (
    AIVerdict,
    SelfReviewOutput,
    VerificationContext,
    strict_json_schema,
)
from llm_verification.validator import LLMOutputValidationError, validate_llm_output

__all__ = [
    "AIVerdict",
    "BaseLLMAdapter",
    "LLMOutputValidationError",
    "LLMRetryExhaustedError",
    "LLMVerdictClassifier",
    "MockLLMAdapter",
    "OpenAILLMAdapter",
    "SelfReviewOutput",
    "VerdictClassifier",
    "VerificationContext",
    "VerificationPromptBuilder",
    "generate_with_retry",
    "strict_json_schema",
    "validate_llm_output",
]
