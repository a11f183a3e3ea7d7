from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from platecost.services.costing.models import Confidence, MatchReason


class IngredientIn(BaseModel):
    name: str
    amount: float = Field(gt=0, allow_inf_nan=False)
    unit: str | None = None
    weight_grams: float | None = Field(
        default=None,
        gt=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("weight_grams", "weightGrams", "weight_override", "weightOverride"),
    )

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = " ".join(v.split())
        if not v:
            raise ValueError("name must not be empty")
        return v


class RecipeCostRequest(BaseModel):
    # Entries are validated one by one so a bad line is rejected without failing the batch
    ingredients: list[Any]
    servings: int = 1
    location: str | None = None
    deadline_seconds: float | None = Field(default=None, gt=0)


class IngredientCostOut(BaseModel):
    original: str
    matched_description: str | None
    price_label: str
    estimated_cost: float
    confidence: Confidence
    needs_review: bool
    packages_needed: int
    package_size: str | None
    portion_cost: float
    package_price: float
    provenance: str
    match_reason: MatchReason
    utilization_ratio: float
    waste_amount: float
    waste_unit: str
    store_location: str | None = None
    explanation: str = ""


class RejectedIngredientOut(BaseModel):
    index: int
    original: Any
    error: str


class RecipeCostResponse(BaseModel):
    total_cost: float
    cost_per_serving: float
    servings: int
    confidence: Confidence
    items: list[IngredientCostOut] = []
    rejected: list[RejectedIngredientOut] = []
    total_package_cost: float = 0.0
    total_waste_value: float = 0.0
    average_utilization: float = 0.0
    needs_review_count: int = 0


class ProviderStatus(BaseModel):
    name: str
    circuit: str
