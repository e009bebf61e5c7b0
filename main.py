import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admissions import config
from admissions.logic.cache import RecommendationCache
from admissions.routes import router as admissions_router
from db import init_db

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("App starting with DATABASE_URL")
    init_db()
    yield


app = FastAPI(title="Admissions Fit Engine", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One cache per process, shared by every request handler
app.state.recommendation_cache = RecommendationCache(ttl_seconds=config.RECOMMENDATION_CACHE_TTL_SECONDS)

app.include_router(admissions_router)


@app.get("/")
def root():
    return {"message": "Admissions fit engine is running"}
