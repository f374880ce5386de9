import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assistant.config import get_settings
from assistant.database import engine, utcnow
from assistant.errors import CapabilityUnavailable, NotFound, PersistenceError, ValidationError
from assistant.routers import ai, conversations, media, search, users

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Assistant API starting (capability provider: %s)", settings.capability_provider)
    try:
        yield
    finally:
        engine.dispose()


app = FastAPI(title="Assistant API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


@app.exception_handler(CapabilityUnavailable)
async def capability_unavailable_handler(request: Request, exc: CapabilityUnavailable):
    logger.warning("%s %s: capability unavailable: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": f"AI service temporarily unavailable. Please try again later. ({exc})"},
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error("%s %s: persistence error: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Storage error."})


app.include_router(users.router)
app.include_router(conversations.router)
app.include_router(media.router)
app.include_router(search.router)
app.include_router(ai.router)


@app.get("/")
def root():
    return {"message": "Assistant API", "docs": "/docs"}


@app.get("/api/health")
def healthcheck():
    return {"status": "ok", "timestamp": utcnow().isoformat()}
