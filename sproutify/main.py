import os

from fastapi import FastAPI
from fastapi.middleware import Middleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from sproutify.api.v1.ai import router as ai_router
from sproutify.api.v1.kiosk import router as kiosk_router
from sproutify.api.v1.milestones import router as milestones_router
from sproutify.api.v1.notebook import router as notebook_router
from sproutify.api.v1.pests import router as pests_router
from sproutify.api.v1.plantings import router as plantings_router
from sproutify.api.v1.scouting import router as scouting_router
from sproutify.api.v1.towers import router as towers_router
from sproutify.api.v1.ws import router as ws_router
from sproutify.core.config import settings
from sproutify.core.logger import app_logger
from sproutify.init_db import init_db, init_db_data

middleware = [
    Middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
]

app = FastAPI(
    title="Sproutify School Backend",
    middleware=middleware
)

os.makedirs(settings.STATIC_DIR, exist_ok=True)
app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")


@app.on_event("startup")
async def startup():
    await init_db()
    await init_db_data()
    app_logger.info("Sproutify backend started")


app.include_router(kiosk_router)
app.include_router(towers_router)
app.include_router(plantings_router)
app.include_router(pests_router)
app.include_router(scouting_router)
app.include_router(notebook_router)
app.include_router(milestones_router)
app.include_router(ai_router)
app.include_router(ws_router)
