# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from househeroes import config
from househeroes.database import SessionLocal, init_db
from househeroes.routers import api, health
from househeroes.schema import create_graphql_router
from househeroes.seed import seed_database

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.is_development():
        logger.info("Development environment: creating schema and seeding sample data")
        init_db()
        db = SessionLocal()
        try:
            seed_database(db)
        finally:
            db.close()
    yield


app = FastAPI(
    title="HouseHeroes API",
    redirect_slashes=False,
    lifespan=lifespan,
)


# Include routers
app.include_router(create_graphql_router(), prefix="/graphql")
app.include_router(api.router)
app.include_router(health.router)
