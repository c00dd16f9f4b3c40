import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.cache import cache
from app.config import settings
from app.errors import register_exception_handlers
from app.middleware import TimingMiddleware
from app.routers import categories, comments, posts, users

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    try:
        await cache.connect()
    except Exception as exc:
        # Redis is optional; the cache degrades to a no-op.
        logger.warning("Cache unavailable: %s", exc)
    yield
    await cache.disconnect()


app = FastAPI(
    title="Blog API",
    description="Posts, comments and categories with search, pagination and author-gated writes",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(categories.router)
app.include_router(posts.router)
app.include_router(comments.router)
app.include_router(users.router)

app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0", "cache": cache.stats}
