import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from config import load_app_config
from monitors import build_monitors
from routers import probes
from storage import recorder

# Setup Logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger("SvcWatch")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("SvcWatch Backend Starting...")
    app.state.app_config = load_app_config()

    yield

    # Shutdown
    logger.info("SvcWatch Backend Stopping...")
    recorder.close()

app = FastAPI(title="SvcWatch API", lifespan=lifespan)
app.state.monitors = build_monitors(recorder)
app.state.app_config = {}
app.state.latest_results = {}

from fastapi.middleware.cors import CORSMiddleware

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # In production, set to specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include Routers
app.include_router(probes.router)


@app.get("/")
def read_root():
    return {"status": "online", "service": "SvcWatch"}

@app.get("/status")
def get_status():
    return {
        "monitors": sorted(app.state.monitors),
        "latest_results": list(app.state.latest_results.values())
    }
