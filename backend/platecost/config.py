from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "platecost"
    env: str = "local"
    log_level: str = "INFO"

    # Used when a request omits location (ZIP, "City, State", or country).
    default_location: str = "10001"

    kroger_base_url: str = "https://api.kroger.com/v1"
    # Token acquisition happens outside this service; set a current bearer token here.
    kroger_access_token: str = ""

    instacart_api_key: str = ""
    instacart_base_url: str = "https://api.parse.bot/scraper/fe062683-8089-4dd2-98b2-48603e6795f8"

    # Per-provider HTTP/wait budget and overall per-recipe deadline.
    provider_timeout_s: float = 4.0
    request_deadline_s: float = 12.0

    price_cache_ttl_minutes: int = 120
    price_cache_max_entries: int = 2048

    # Tune parallelism: ThreadPoolExecutor workers for per-ingredient costing and provider fan-out.
    ingredient_batch_max_workers: int = 8
    provider_max_workers: int = 16

    # Generic produce rate used when nothing in the catalog matches but grams are known.
    fallback_price_per_kg: float = 8.0

    circuit_failure_threshold: int = 3
    circuit_window_s: float = 60.0
    circuit_reset_s: float = 30.0

    class Config:
        env_file = ".env"


settings = Settings()
