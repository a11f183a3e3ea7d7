from typing import Optional

from platecost.config import Settings, settings as default_settings
from platecost.logging import get_logger
from platecost.services.providers.base import PriceProvider
from platecost.services.providers.instacart import InstacartClient, InstacartProvider
from platecost.services.providers.kroger import KrogerProvider

logger = get_logger(__name__)


def build_providers(settings: Optional[Settings] = None) -> list[PriceProvider]:
    """Providers in registration order; one is registered only when its credential is set."""
    s = settings or default_settings
    providers: list[PriceProvider] = []
    if s.kroger_access_token:
        token = s.kroger_access_token
        providers.append(KrogerProvider(token_supplier=lambda: token, base_url=s.kroger_base_url))
    if s.instacart_api_key:
        client = InstacartClient(api_key=s.instacart_api_key, base_url=s.instacart_base_url)
        providers.append(InstacartProvider(client=client))
    logger.info("providers.registered names=%s", ",".join(p.name for p in providers) or "none")
    return providers
