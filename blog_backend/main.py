import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from blog_backend.config import settings
from blog_backend.database import engine, init_models
from blog_backend.exceptions import install_exception_handlers
from blog_backend.middleware import TimingMiddleware
from blog_backend.routers import articles, users

VERSION = "1.0.0"

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if settings.CREATE_TABLES:
        await init_models()
    logger.info("Blog backend started (env=%s)", settings.APP_ENV)
    yield
    # Shutdown
    await engine.dispose()

app = FastAPI(
    title="Blog Backend",
    description="Users, articles, comments and sessions with cascading removal",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

# Routers
app.include_router(articles.router)
app.include_router(users.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}
