from contextlib import asynccontextmanager
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

from infrastructure.metrics.metrics import metrics_endpoint
from app.routers.v1 import router
from app.dependencies import get_logging_port, run_notification_scan
from domain.config import get_scheduler_config
from infrastructure.scheduler import NotificationScheduler

# Import database models to ensure they're registered
from infrastructure.db.database import init_models


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    config = get_scheduler_config()
    app.state.scheduler = NotificationScheduler(run_notification_scan, config=config, logging_port=get_logging_port())
    if config.enabled:
        app.state.scheduler.start()
    try:
        yield
    finally:
        await app.state.scheduler.stop()


app = FastAPI(title="installment-engine", lifespan=lifespan)

@app.get("/metrics")
async def metrics():
    return metrics_endpoint()

@app.get("/health")
async def health():
    return {"status": "ok", "message": "installment-engine is running"}

app.include_router(router)
