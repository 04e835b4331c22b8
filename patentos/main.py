from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from patentos.api.routes import patents, search, session
from patentos.config import settings
from patentos.services import logger as log_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.has_credentials:
        log_service.log_event(
            event_type="config_warning",
            message="OPENROUTER_API_KEY is not set; searches will fail until it is provided",
            error="missing_credential",
        )
    yield


app = FastAPI(
    title="PatentOS",
    description="AI-assisted patent landscape explorer for UK replication opportunities",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(search.router)
app.include_router(session.router)
app.include_router(patents.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "patentos"}
