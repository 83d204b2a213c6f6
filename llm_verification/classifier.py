"""Verdict classifier seam used by the Tier-2 engine and the self-review loop."""

from abc import ABC, abstractmethod

from llm_verification.adapter import BaseLLMAdapter
from llm_verification.prompt_builder import VerificationPromptBuilder
from llm_verification.retry import generate_with_retry
from llm_verification.schema import AIVerdict, SelfReviewOutput, VerificationContext, strict_json_schema

VERDICT_TEMPERATURE = 0.1
VERDICT_MAX_TOKENS = 500
REVIEW_TEMPERATURE = 0.3
REVIEW_MAX_TOKENS = 400

_VERDICT_SCHEMA = strict_json_schema(AIVerdict)
_REVIEW_SCHEMA = strict_json_schema(SelfReviewOutput)


class VerdictClassifier(ABC):
    """Abstract classifier. Implementations may raise; callers contain failures per item."""

    @abstractmethod
    async def classify(self, excerpt: str, context: VerificationContext, *, system_prompt: str) -> AIVerdict:
        """Classify one page excerpt against what the catalog expects."""

    @abstractmethod
    async def review(self, prompt: str) -> SelfReviewOutput:
        """Produce candidate learning notes from a self-review prompt."""


class LLMVerdictClassifier(VerdictClassifier):
    """Classifier backed by an LLM adapter with validation and retry."""

    def __init__(
        self,
        adapter: BaseLLMAdapter,
        *,
        prompt_builder: VerificationPromptBuilder | None = None,
        max_retries: int = 2,
    ) -> None:
        self._adapter = adapter
        self._prompt_builder = prompt_builder or VerificationPromptBuilder()
        self._max_retries = max_retries

    async def classify(self, excerpt: str, context: VerificationContext, *, system_prompt: str) -> AIVerdict:
        return await generate_with_retry(
            self._adapter,
            output_model=AIVerdict,
            system=system_prompt,
            prompt=self._prompt_builder.build_user_prompt(excerpt, context),
            schema_name="listing_verdict",
            response_schema=_VERDICT_SCHEMA,
            temperature=VERDICT_TEMPERATURE,
            max_tokens=VERDICT_MAX_TOKENS,
            max_retries=self._max_retries,
        )

    async def review(self, prompt: str) -> SelfReviewOutput:
        return await generate_with_retry(
            self._adapter,
            output_model=SelfReviewOutput,
            system=None,
            prompt=prompt,
            schema_name="self_review",
            response_schema=_REVIEW_SCHEMA,
            temperature=REVIEW_TEMPERATURE,
            max_tokens=REVIEW_MAX_TOKENS,
            max_retries=self._max_retries,
        )
