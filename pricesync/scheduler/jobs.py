from pricesync import main as runner
from pricesync.utils.logger import get_logger

logger = get_logger(__name__)


async def scheduled_price_update() -> None:
    """
    Scheduler job for the daily price update.
    There is no caller to report to, so failures end in the log.
    """
    try:
        logger.info("[Scheduler] Triggered scheduled stock price update")
        result = await runner.run_price_update()
        logger.info(f"[Scheduler] Completed: {result.succeeded}/{result.total} rows priced")
    except Exception as exc:
        logger.exception(f"[Scheduler] Error in scheduled stock price update: {exc}")
