# backend/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers.distribution import router as distribution_router
from routers.stats import router as stats_router
from services.dataset import DatasetHandle
from services.errors import DatasetError
from utils.data_store import clear_dataset, set_dataset
from utils.settings import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------
# DATASET LIFECYCLE
# ---------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        set_dataset(
            DatasetHandle.from_csv(
                settings.price_data_file,
                separator=settings.price_data_separator,
            )
        )
    except DatasetError as e:
        # the API still starts; data routes answer 503 until a dataset exists
        logger.error("Dataset not loaded: %s", e)
    yield
    clear_dataset()


# ---------------------------------------------------------
# APP INIT
# ---------------------------------------------------------

app = FastAPI(title="Vehicle Price Statistics API", version="0.1.0", lifespan=lifespan)

logger.info("Allowed CORS origins: %s", settings.cors_allowed_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------
# ROUTERS
# ---------------------------------------------------------

app.include_router(distribution_router)
app.include_router(stats_router)


@app.get("/")
def root():
    return {"message": "Vehicle price statistics API running."}
