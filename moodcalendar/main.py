import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from fastapi.responses import JSONResponse
from moodcalendar.exceptions.handlers import (
    application_exception_handler,
    http_exception_handler,
    generic_exception_handler
)
from moodcalendar.exceptions.errors import ApplicationException
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError

from moodcalendar.api.v1.routes import calendar_router, day_router
from moodcalendar.utils.store_instance import initialize_store
from moodcalendar.core.config import settings
from moodcalendar.core.logger import get_logger

logger = get_logger("moodcalendar")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Mood Calendar is starting...")
    try:
        await initialize_store()
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise e

    yield

    logger.info("🛑 Mood Calendar is shutting down...")


app = FastAPI(
    title="Mood Calendar",
    version="1.0.0",
    lifespan=lifespan,
    description="""
    Personal mood journal backend.

    Rate each day's morning, afternoon and evening as GOOD, AVERAGE or BAD,
    add what made you happy or sad, and read the month grid and the yearly
    pixel overview colored from those ratings.
    """,
)

# CORS configuration
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(calendar_router, prefix="/api/v1")
app.include_router(day_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    return {
        "message": "Mood Calendar API",
        "docs": "/docs",
        "development_mode": settings.IS_DEVELOPMENT,
        "version": "1.0.0"
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        errors.append({
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input")) if error.get("input") is not None else None
        })

    return JSONResponse(
        status_code=422,
        content={
            "detail": errors,
            "url": str(request.url),
            "method": request.method
        }
    )


# Exception handlers
app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

if __name__ == "__main__":
    uvicorn.run(
        "moodcalendar.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.IS_DEVELOPMENT,
        timeout_graceful_shutdown=30
    )
