"""
OdontoFlow - Dental clinic patient records API.
Identity provider, patient record store and dashboard statistics.
"""
import logging.config

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .core.config import settings
from .models.base import Base, engine
from .models import patient, user  # noqa: F401  Ensure tables are registered
from .api import auth, patients, dashboard
from .seed_demo import seed_demo_data

logging.config.dictConfig({
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "default"},
    },
    "loggers": {
        "odontoflow": {"handlers": ["console"], "level": settings.LOG_LEVEL, "propagate": False},
    },
})

# Create all database tables
# NOTE: In production, use Alembic migrations instead of create_all()
Base.metadata.create_all(bind=engine)

if settings.SEED_DEMO_DATA:
    seed_demo_data()

app = FastAPI(
    title="OdontoFlow Clinical Dashboard API",
    description=(
        "Patient registry for a dental practice: classification and procedure "
        "tracking with filterable dashboard statistics."
    ),
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # TODO: Restrict to the dashboard's origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(patients.router, prefix="/api/v1")
app.include_router(dashboard.router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "OdontoFlow API", "version": settings.VERSION}
