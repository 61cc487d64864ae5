# tubely/main.py
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from tubely.config import settings
from tubely.core.logging import setup_logging
from tubely.core.metrics import router_metrics
from tubely.middleware.observability import ObservabilityMiddleware
from tubely.routers import thumbnails as thumbnails_router
from tubely.routers import uploads as uploads_router
from tubely.routers import videos as videos_router
from tubely.services.storage import build_thumbnail_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    setup_logging()
    os.makedirs(settings.assets_root, exist_ok=True)

    # store de thumbnails pertence ao app, não ao módulo
    app.state.thumbnail_store = build_thumbnail_store(settings)

    try:
        yield
    finally:
        app.state.thumbnail_store = None


# --- App ---
app = FastAPI(
    title="Tubely",
    version="0.1.0",
    lifespan=lifespan,
    swagger_ui_parameters={"persistAuthorization": True},
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(ObservabilityMiddleware)

# Routers
app.include_router(videos_router.router)
app.include_router(uploads_router.router)
app.include_router(thumbnails_router.router)
app.include_router(router_metrics)

# arquivos gravados pelo store "assets"
app.mount("/assets", StaticFiles(directory=settings.assets_root, check_dir=False), name="assets")


@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok"}
