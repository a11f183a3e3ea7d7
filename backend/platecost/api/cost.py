import dataclasses
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException

from platecost.logging import get_logger
from platecost.schemas.cost import RecipeCostRequest, RecipeCostResponse
from platecost.services.pricing.estimator import RecipeCostEstimator, RecipeInputError, build_estimator

router = APIRouter()
logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_estimator() -> RecipeCostEstimator:
    return build_estimator()


@router.post("/recipes/cost", response_model=RecipeCostResponse)
def estimate_cost(
    payload: RecipeCostRequest,
    estimator: RecipeCostEstimator = Depends(get_estimator),
) -> RecipeCostResponse:
    logger.info(
        "recipes.cost.start ingredients=%s servings=%s location=%s",
        len(payload.ingredients),
        payload.servings,
        payload.location,
    )
    try:
        result = estimator.estimate_recipe_cost(
            payload.ingredients,
            payload.servings,
            location=payload.location,
            deadline_s=payload.deadline_seconds,
        )
    except RecipeInputError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    logger.info(
        "recipes.cost.done total=%.2f confidence=%s needs_review=%s rejected=%s",
        result.total_cost,
        result.confidence.value,
        result.needs_review_count,
        len(result.rejected),
    )
    return RecipeCostResponse.model_validate(dataclasses.asdict(result))
