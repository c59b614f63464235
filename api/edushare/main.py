import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from edushare.config import settings
from edushare.db.database import init_db
from edushare.routes import auth, posts, users, leaderboard, chatbot, resources
from edushare.worker.reset_worker import WeeklyResetWorker

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources."""
    await init_db()

    worker = None
    if settings.enable_scheduler:
        worker = WeeklyResetWorker()
        worker.start()

    yield

    if worker:
        worker.shutdown()


app = FastAPI(
    title='EduShare API',
    description='Backend API for the EduShare academic resource sharing platform',
    version='0.1.0',
    lifespan=lifespan,
)

# CORS for the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

# Routes
app.include_router(auth.router, prefix='/api/auth', tags=['auth'])
app.include_router(users.router, prefix='/api/users', tags=['users'])
app.include_router(posts.router, prefix='/api/posts', tags=['posts'])
app.include_router(leaderboard.router, prefix='/api/leaderboard', tags=['leaderboard'])
app.include_router(resources.router, prefix='/api/resources', tags=['resources'])
app.include_router(chatbot.router, prefix='/api/chatbot', tags=['chatbot'])


@app.get('/health')
async def health_check():
    """Health check endpoint."""
    return {'status': 'ok', 'service': 'edushare-api'}
