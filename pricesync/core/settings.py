"""Runtime settings for the price update job."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from pricesync.core.config import Config
from pricesync.core.errors import ConfigError

FETCH_STRATEGIES = {"browser", "api"}

DEFAULT_URL_TEMPLATE = "https://www.tradingview.com/symbols/CSELK-{symbol}/"
DEFAULT_PRICE_SELECTOR = ".lastContainer-JWoJqCpY .js-symbol-last > span"
DEFAULT_TRADE_SUMMARY_URL = "https://www.cse.lk/api/tradeSummary"


def _setting(env_var: str, *keys: str, default: Any = None) -> Any:
    """Environment variable first, then settings.yaml, then the default."""
    raw = os.getenv(env_var)
    if raw is not None and raw != "":
        return raw
    return Config.get(*keys, default=default)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _as_int(value: Any, key: str, section: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{section}.{key} must be an integer, got {value!r}", key=key, section=section) from exc


def _as_float(value: Any, key: str, section: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{section}.{key} must be a number, got {value!r}", key=key, section=section) from exc


class Settings:
    """Container for runtime-tunable settings."""

    def __init__(self) -> None:
        self.spreadsheet_id: Optional[str] = _setting("SPREADSHEET_ID", "sheet", "spreadsheet_id") or None
        self.credentials_file: Optional[str] = (
            _setting("GOOGLE_CREDENTIALS_FILE", "sheet", "credentials_file") or None
        )
        self.credentials_json: Optional[str] = os.getenv("GOOGLE_CREDENTIALS_JSON") or None

        self.symbols_range: str = _setting("SYMBOLS_RANGE", "sheet", "ranges", "symbols", default="Sheet1!B2:B")
        self.prices_range: str = _setting("PRICES_RANGE", "sheet", "ranges", "prices", default="Sheet1!H2:H")
        self.timestamps_range: str = _setting(
            "TIMESTAMPS_RANGE", "sheet", "ranges", "timestamps", default="Sheet1!L2:L"
        )

        self.fetch_strategy: str = str(_setting("FETCH_STRATEGY", "fetch", "strategy", default="browser")).lower()
        self.deduplicate: bool = _as_bool(_setting("DEDUPLICATE", "fetch", "deduplicate", default=True))
        self.max_concurrency: int = max(
            _as_int(_setting("MAX_CONCURRENCY", "fetch", "max_concurrency", default=4), "max_concurrency", "fetch"), 1
        )

        self.url_template: str = _setting(
            "BROWSER_URL_TEMPLATE", "fetch", "browser", "url_template", default=DEFAULT_URL_TEMPLATE
        )
        self.price_selector: str = _setting(
            "PRICE_SELECTOR", "fetch", "browser", "price_selector", default=DEFAULT_PRICE_SELECTOR
        )
        self.navigation_timeout_ms: int = _as_int(
            _setting("NAVIGATION_TIMEOUT_MS", "fetch", "browser", "navigation_timeout_ms", default=60000),
            "navigation_timeout_ms",
            "fetch.browser",
        )
        self.retry_attempts: int = max(
            _as_int(
                _setting("SELECTOR_RETRY_ATTEMPTS", "fetch", "browser", "retry_attempts", default=3),
                "retry_attempts",
                "fetch.browser",
            ),
            1,
        )
        self.retry_delay_seconds: float = max(
            _as_float(
                _setting("SELECTOR_RETRY_DELAY", "fetch", "browser", "retry_delay_seconds", default=3.0),
                "retry_delay_seconds",
                "fetch.browser",
            ),
            0.0,
        )
        self.headless: bool = _as_bool(_setting("BROWSER_HEADLESS", "fetch", "browser", "headless", default=True))

        self.trade_summary_url: str = _setting(
            "TRADE_SUMMARY_URL", "fetch", "api", "endpoint", default=DEFAULT_TRADE_SUMMARY_URL
        )
        self.trade_summary_field: str = _setting(
            "TRADE_SUMMARY_FIELD", "fetch", "api", "array_field", default="reqTradeSummery"
        )
        self.trade_summary_price_field: str = _setting(
            "TRADE_SUMMARY_PRICE_FIELD", "fetch", "api", "price_field", default="closingPrice"
        )
        self.api_timeout_seconds: float = _as_float(
            _setting("API_TIMEOUT_SECONDS", "fetch", "api", "timeout", default=30), "timeout", "fetch.api"
        )

        self.update_cron: str = _setting("UPDATE_CRON", "schedule", "cron", default="45 14 * * 1-5")
        self.timezone: str = _setting("UPDATE_TIMEZONE", "schedule", "timezone", default="Asia/Colombo")
        self.scheduler_enabled: bool = _as_bool(_setting("SCHEDULER_ENABLED", "schedule", "enabled", default=False))
        self.misfire_grace_seconds: int = _as_int(
            _setting("MISFIRE_GRACE_SECONDS", "schedule", "misfire_grace_seconds", default=300),
            "misfire_grace_seconds",
            "schedule",
        )

        if self.fetch_strategy not in FETCH_STRATEGIES:
            raise ConfigError(
                f"Unknown fetch strategy {self.fetch_strategy!r}, expected one of {sorted(FETCH_STRATEGIES)}",
                key="strategy",
                section="fetch",
            )

    def require_spreadsheet_id(self) -> str:
        if not self.spreadsheet_id:
            raise ConfigError("SPREADSHEET_ID is not configured", key="spreadsheet_id", section="sheet")
        return self.spreadsheet_id

    def credentials_info(self) -> Dict[str, Any]:
        """Service account key material, from GOOGLE_CREDENTIALS_JSON or a key file."""
        if self.credentials_json:
            try:
                return json.loads(self.credentials_json)
            except json.JSONDecodeError as exc:
                raise ConfigError("GOOGLE_CREDENTIALS_JSON is not valid JSON", key="credentials_json") from exc

        if not self.credentials_file:
            raise ConfigError(
                "No service account credentials configured "
                "(set GOOGLE_CREDENTIALS_JSON or GOOGLE_CREDENTIALS_FILE)",
                key="credentials_file",
                section="sheet",
            )
        path = Path(self.credentials_file)
        if not path.exists():
            raise ConfigError(f"Credentials file not found: {path}", key="credentials_file", section="sheet")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Credentials file is not valid JSON: {path}", key="credentials_file") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    load_dotenv()
    return Settings()


__all__ = ["Settings", "get_settings", "FETCH_STRATEGIES"]
