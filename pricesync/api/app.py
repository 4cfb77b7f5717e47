"""
HTTP trigger for the price update.

Run locally:
    uvicorn pricesync.api.app:app --port 8000
"""

import os

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from pricesync import main as runner
from pricesync.core.settings import get_settings
from pricesync.utils.logger import get_logger

log = get_logger(__name__)

app = FastAPI(
    title="PriceSync",
    description="Scrapes stock prices and writes them into the tracking spreadsheet",
    version="1.0.0",
)

SUCCESS_MESSAGE = "Stock prices updated successfully!"
FAILURE_MESSAGE = "Failed to update stock prices."


@app.on_event("startup")
async def startup_event():
    try:
        settings = get_settings()
        if not settings.scheduler_enabled:
            return

        from pricesync.scheduler.cron import build_scheduler

        app.state.scheduler = build_scheduler(settings)
        app.state.scheduler.start()
        log.info(f"Scheduler started in API process ({settings.update_cron}, {settings.timezone})")
    except Exception as e:
        log.error(f"Scheduler not started: {e}")


@app.on_event("shutdown")
async def shutdown_event():
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)


@app.api_route("/update-prices", methods=["GET", "POST"], response_class=PlainTextResponse)
async def update_prices():
    log.info("Received request to update stock prices.")
    try:
        await runner.run_price_update()
    except Exception as e:
        log.exception(f"Error in HTTP-triggered stock price update: {e}")
        return PlainTextResponse(FAILURE_MESSAGE, status_code=500)
    return PlainTextResponse(SUCCESS_MESSAGE, status_code=200)


@app.get("/health")
def health():
    return {"status": "ok", "env": os.getenv("ENV", "dev")}
