import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from collaboration.application.user_generator import generate_user
from collaboration.interfaces.schemas import CollaboratorResponse, HealthResponse
from collaboration.interfaces.ws_handler import router as ws_router
from shared.config import settings
from shared.dependencies import document_store
from shared.exceptions import AppError
from shared.infrastructure.database import engine
from shared.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    # The schema must exist before the first session can load a document
    await document_store.ensure_schema()
    yield
    await engine.dispose()


app = FastAPI(
    title="Collaborative Document Service",
    version="0.1.0",
    lifespan=lifespan,
)

allowed_origins = [
    origin
    for origin in ("http://localhost:5173", "http://localhost:3000", settings.FRONTEND_URL)
    if origin
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ws_router)


@app.exception_handler(AppError)
async def app_error_handler(request, exc: AppError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@app.get("/user", response_model=CollaboratorResponse)
async def user():
    info = generate_user()
    return CollaboratorResponse(name=info.name, color=info.color)


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
