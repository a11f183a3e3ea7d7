from fastapi import APIRouter, Depends

from platecost.api.cost import get_estimator
from platecost.schemas.cost import ProviderStatus
from platecost.services.pricing.estimator import RecipeCostEstimator

router = APIRouter()


@router.get("/providers", response_model=list[ProviderStatus])
def list_providers(estimator: RecipeCostEstimator = Depends(get_estimator)) -> list[ProviderStatus]:
    """Configured live price sources and their circuit state."""
    return [ProviderStatus(**s) for s in estimator.reconciler.provider_status()]
