from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config.settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# HTTP client debug logs off
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


# ✅ middlewares
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ routers
from routers import (
    auth, classes, students, programs, lessons, links,
    summaries, exams,
)

from database.db import Base, engine

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

# ✅ CORS (front end origins from CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ request latency (X-Latency-Ms response header)
app.add_middleware(TimingMiddleware)

# ✅ global error handlers (one JSON error shape)
add_error_handlers(app)

# ✅ /v1 prefixed routers
app.include_router(auth.router,       prefix="/v1")
app.include_router(classes.router,    prefix="/v1")
app.include_router(students.router,   prefix="/v1")
app.include_router(programs.router,   prefix="/v1")
app.include_router(lessons.router,    prefix="/v1")
app.include_router(links.router,      prefix="/v1")
app.include_router(summaries.router,  prefix="/v1")
app.include_router(exams.router,      prefix="/v1")   # ✅ AI exam grading


# ✅ health check
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running"}


@app.on_event("startup")
def _create_tables():
    # creates missing tables only, no migrations
    Base.metadata.create_all(bind=engine)


# ✅ root
@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - student progress tracking for teachers"}
