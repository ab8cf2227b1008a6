from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.enrichment_geoip import router as geoip_cfg_router
from .api.geo import router as geo_router
from .api.health import router as health_router
from .api.prometheus import router as prometheus_router
from .config import API_PREFIX, API_VERSION, GEO_PROVIDER, GEOIP_DB_CITY, GEO_STATIC_FILE, get_demo_mode
from .errors import ConfigurationError, MisuseError
from .logging_config import setup_logging
from .middleware import TracingMiddleware
from . import providers

# Configure logging at import time
setup_logging()

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(application: FastAPI):
    # Startup: fail fast when the provider cannot be loaded
    built = None
    if providers.current_provider() is None:
        built = providers.build_provider(
            GEO_PROVIDER,
            db_path=GEOIP_DB_CITY,
            static_file=GEO_STATIC_FILE,
            demo=get_demo_mode(),
        )
        providers.set_provider(built)

    logger.info("geofacade starting up", extra={"component": "api", "version": API_VERSION})
    yield

    # Shutdown: close swapped-out providers, and the live one if startup installed it
    providers.close_retired()
    if built is not None:
        current = providers.current_provider()
        if current is not None and current is not built:
            current.close()
        built.close()
        providers.set_provider(None)
    logger.info("geofacade shut down", extra={"component": "api"})


app = FastAPI(title="geofacade", version=API_VERSION, lifespan=lifespan)
app.add_middleware(TracingMiddleware)


@app.exception_handler(MisuseError)
async def misuse_error_handler(request: Request, exc: MisuseError):
    return JSONResponse(status_code=400, content={"error": "misuse", "detail": str(exc)})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"geo provider misconfigured: {exc}", extra={"component": "api"})
    return JSONResponse(status_code=503, content={"error": "configuration", "detail": str(exc)})


app.include_router(health_router, prefix=API_PREFIX)
app.include_router(geo_router, prefix=API_PREFIX)
app.include_router(prometheus_router, prefix=API_PREFIX)
app.include_router(geoip_cfg_router, prefix=API_PREFIX)
