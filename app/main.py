import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api import dashboard, devices, telemetry
from app.config.settings import get_settings
from app.core.errors import GraphQLOperationError, GraphQLTransportError, IngestionError
from app.core.graphql_client import create_graphql_client
from app.core.redis_client import close_redis_client, create_redis_client

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    app.state.graphql_client = create_graphql_client(settings)
    app.state.redis = (
        create_redis_client(settings) if settings.idempotency_enabled else None
    )
    logger.info(f"SensorDash started against {settings.api_endpoint}")
    yield
    await app.state.graphql_client.close()
    if app.state.redis is not None:
        await close_redis_client(app.state.redis)
    logger.info("SensorDash stopped")


app = FastAPI(title="SensorDash", version="1.0.0", lifespan=lifespan)

app.include_router(devices.router, prefix="/devices", tags=["devices"])
app.include_router(telemetry.router, prefix="/telemetry", tags=["telemetry"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "sensordash"}


@app.exception_handler(IngestionError)
async def ingestion_error_handler(request: Request, exc: IngestionError):
    return JSONResponse(status_code=exc.status_code, content=exc.body)


@app.exception_handler(GraphQLTransportError)
async def transport_error_handler(request: Request, exc: GraphQLTransportError):
    logger.error(f"Backend request failed: {exc}")
    return JSONResponse(status_code=502, content={"error": "Backend unavailable"})


@app.exception_handler(GraphQLOperationError)
async def operation_error_handler(request: Request, exc: GraphQLOperationError):
    logger.error(str(exc))
    return JSONResponse(status_code=502, content={"error": exc.errors})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"error": str(exc)})
