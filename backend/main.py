import os
import sys
import logging
from contextlib import asynccontextmanager

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import FOREST_CACHE_TTL_SECONDS
from database import init_db
from errors import register_exception_handlers
from routes.journal_routes import router as journal_router
from routes.social_routes import router as social_router
from routes.stats_routes import router as stats_router
from routes.coach_routes import router as coach_router
from routes.goal_routes import router as goal_router
from services.cache_service import TTLCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"Forest cache TTL: {FOREST_CACHE_TTL_SECONDS}s")
    yield


app = FastAPI(title="Morning Forest Journal", lifespan=lifespan)

# Explicitly owned read-model cache; watering invalidates it
app.state.forest_cache = TTLCache(ttl_seconds=FOREST_CACHE_TTL_SECONDS)

register_exception_handlers(app)


@app.get("/api/v1/health-check")
async def health():
    return {"status": "ok", "message": "Backend is alive!"}


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(journal_router)
app.include_router(social_router)
app.include_router(stats_router)
app.include_router(coach_router)
app.include_router(goal_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
