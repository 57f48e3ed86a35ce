from dotenv import load_dotenv
load_dotenv()
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from worklog.core.config import settings
from worklog.core.errors import register_exception_handlers
from worklog.core.rate_limit import limiter
from worklog.api import router as api_router
from worklog.services.report_service import shutdown_report_queue
from worklog import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=__version__
)

# Add rate limiter to app state
app.state.limiter = limiter

register_exception_handlers(app)

origins = [settings.FRONTEND_URL]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Tables are managed by alembic migrations
app.include_router(api_router, prefix="/api")


@app.on_event("shutdown")
def stop_report_workers():
    shutdown_report_queue()


@app.get("/")
def root():
    return {
        "message": "Worklog backend running",
        "version": __version__
    }
