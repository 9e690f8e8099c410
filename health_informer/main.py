from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from health_informer.api.routes import articles, debug, search
from health_informer.config import settings
from health_informer.services import logger as log_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_service.log_event(
        event_type="startup",
        message="Health Informer starting",
        search_provider=settings.search_provider,
        llm_provider=settings.llm_provider,
    )
    yield


app = FastAPI(
    title="Health Informer",
    description="Health news summaries, plain-language rewrites and cited answers",
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
app.include_router(articles.router)
app.include_router(debug.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "health-informer"}
