from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from platecost.api.cost import get_estimator
from platecost.api.routes import router as api_router
from platecost.config import settings
from platecost.logging import configure_logging, get_logger

app = FastAPI(title="Platecost API")
logger = get_logger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    configure_logging()
    logger.info("startup: app=%s env=%s", settings.app_name, settings.env)


@app.on_event("shutdown")
def on_shutdown() -> None:
    if get_estimator.cache_info().currsize:
        get_estimator().reconciler.shutdown()


app.include_router(api_router)
