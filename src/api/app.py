"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes import afa, anlage_v, rent_increase
from src.config import settings
from src.data.cache import AfaSettingsCache

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(
    title="Anlage V Engine",
    description="Annual rental income summaries and rent increase checks for German landlords",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.afa_cache = AfaSettingsCache.from_settings()

app.include_router(anlage_v.router)
app.include_router(rent_increase.router)
app.include_router(afa.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
