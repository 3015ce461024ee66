"""
Main FastAPI application for the candlefeed datafeed.

Initializes the FastAPI app with middleware, UDF routes, exception handlers
and the history service lifecycle.
"""

from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .api.routes import history, news, quotes, symbols, udf
from .core.config import config
from .core.exceptions import DatafeedException, to_udf_error
from .core.logging import get_logger, setup_logging
from .services.history import get_history_service
from .services.news import get_news_proxy

# Initialize logging
setup_logging(config)
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title=config.APP_NAME,
    description="UDF-compatible FX datafeed with an in-memory candle cache",
    version=config.APP_VERSION,
    debug=config.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "History", "description": "Historical bars served from the candle cache"},
        {"name": "Symbols", "description": "Symbol metadata and search"},
        {"name": "Quotes", "description": "Last prices from cached bars"},
        {"name": "UDF", "description": "Datafeed configuration, server time and marks"},
        {"name": "News", "description": "Raw RSS news proxies"},
        {"name": "System", "description": "Health and version"},
    ],
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins_list,
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(udf.router)
app.include_router(symbols.router)
app.include_router(history.router)
app.include_router(quotes.router)
app.include_router(news.router)


# Health check endpoint
@app.get("/health", tags=["System"])
async def health_check():
    """
    Basic health check endpoint.

    Returns liveness plus the cache and reset scheduler status.
    """
    return {
        "status": "healthy",
        "app": config.APP_NAME,
        "version": config.APP_VERSION,
        "environment": config.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "history": get_history_service().get_status(),
    }


# Root endpoint
@app.get("/", tags=["System"], response_class=PlainTextResponse)
async def root():
    """Datafeed version banner."""
    key_prefix = config.UPSTREAM_API_KEY[:3]
    return f"Datafeed version is {config.DATAFEED_VERSION}\nCurrent key is {key_prefix}"


# Error handlers
@app.exception_handler(DatafeedException)
async def datafeed_exception_handler(request, exc):
    """Render request errors as UDF error bodies."""
    logger.warning(f"Request error on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=200, content=to_udf_error(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    """Render query parameter validation failures as UDF error bodies."""
    errors = exc.errors()
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "query")
        message = f"invalid parameter {location}: {errors[0].get('msg', 'invalid value')}"
    else:
        message = "invalid request"
    logger.warning(f"Validation error on {request.url.path}: {message}")
    return JSONResponse(status_code=200, content={"s": "error", "errmsg": message})


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"s": "error", "errmsg": "Internal server error"},
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    """Handle startup event."""
    logger.info(f"Starting {config.APP_NAME} v{config.APP_VERSION}")
    logger.info(f"Environment: {config.ENVIRONMENT}")

    try:
        history_service = get_history_service()
        await history_service.start()
        logger.info(f"History service status: {history_service.get_status()}")
    except Exception as e:
        logger.error(f"Failed to start history service: {e}")
        raise


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Handle shutdown event."""
    logger.info(f"Shutting down {config.APP_NAME}")

    try:
        await get_history_service().shutdown()
    except Exception as e:
        logger.error(f"Error stopping history service: {e}")

    try:
        await get_news_proxy().close()
        logger.info("News proxy closed")
    except Exception as e:
        logger.error(f"Error closing news proxy: {e}")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=config.API_HOST,
        port=config.API_PORT,
        reload=False,
        log_level=config.LOG_LEVEL.lower(),
    )
