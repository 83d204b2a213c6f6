"""Structured output schemas for the listing verification classifier."""

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AIAction = Literal[
    "KEEP",
    "MARK_OOS",
    "MARK_INSTOCK",
    "UPDATE_PRICE",
    "FLAG_WRONG",
    "REMOVE_DEAD",
]


class AIVerdict(BaseModel):
    """Only allowed output contract for one listing verification."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )

    listing_active: bool = Field(
        description="Is this page an active product listing (not 404, not homepage redirect, not category page)?"
    )
    correct_product: bool = Field(
        description="Does the product on this page match the expected product name?"
    )
    in_stock: bool = Field(description="Is the product currently in stock and available to purchase?")
    detected_price: Optional[float] = Field(
        description="The current price shown on the page in USD, or null if not found"
    )
    detected_product_name: str = Field(description="The product name as displayed on the page")
    page_title: str = Field(description="The HTML page title or main heading")
    action: AIAction = Field(description="The recommended action based on analysis")
    confidence: float = Field(ge=0.0, le=1.0, description="Confidence in this analysis from 0.0 to 1.0")
    reasoning: str = Field(description="Brief explanation of the decision (1-2 sentences)")


class SelfReviewOutput(BaseModel):
    """Output contract for one self-review pass over the decision log."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )

    notes: List[str] = Field(min_length=1, max_length=3, description="1-3 concise learning notes")
    summary: str = Field(description="Brief summary of the review")


@dataclass(frozen=True)
class VerificationContext:
    """What the catalog currently believes about a listing."""

    product_name: str
    vendor_name: str
    expected_price: float
    currently_in_stock: bool
    http_status: Optional[int] = None


def strict_json_schema(model: type[BaseModel]) -> Dict[str, Any]:
    """Return a JSON schema accepted by strict structured-output endpoints.

    Strict mode requires every property to be listed as required and
    additional properties to be disallowed at every object level.

    Args:
        model: Pydantic model describing the expected output.

    Returns:
        A JSON schema dictionary.
    """
    schema = model.model_json_schema()
    schema["additionalProperties"] = False
    schema["required"] = list(schema.get("properties", {}).keys())
    return schema
