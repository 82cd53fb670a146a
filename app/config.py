import os, logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    pass


def parse_id_list(raw: Optional[str]) -> FrozenSet[int]:
    """Parse "5, 6,7" into {5, 6, 7}. Empty or unset gives an empty set."""
    if not raw:
        return frozenset()
    ids = set()
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        try:
            ids.add(int(item))
        except ValueError:
            raise ConfigurationError(f"ALLOWED_OPERATOR_IDS contains a non-integer id: {item!r}")
    return frozenset(ids)


@dataclass(frozen=True)
class Settings:
    bot_token: str
    allowed_operator_ids: FrozenSet[int] = field(default_factory=frozenset)
    pricing_api_url: str = "http://localhost:8000"
    pricing_api_timeout: float = 10.0
    customer_api_url: str = ""
    customer_api_key: str = ""
    database_url: str = "sqlite:///./miniapp.db"
    webapp_url: str = "https://example.com/webapp"
    log_level: str = "INFO"


def load_settings() -> Settings:
    load_dotenv()

    bot_token = os.getenv("TELEGRAM_BOT_TOKEN", "")
    if not bot_token:
        raise ConfigurationError("TELEGRAM_BOT_TOKEN is not set")

    allowed = parse_id_list(os.getenv("ALLOWED_OPERATOR_IDS", ""))
    if not allowed:
        logger.warning("ALLOWED_OPERATOR_IDS is empty: every verified Telegram user is treated as an operator")

    try:
        timeout = float(os.getenv("PRICING_API_TIMEOUT", "10"))
    except ValueError:
        raise ConfigurationError("PRICING_API_TIMEOUT must be a number of seconds")

    return Settings(
        bot_token=bot_token,
        allowed_operator_ids=allowed,
        pricing_api_url=os.getenv("PRICING_API_URL", "http://localhost:8000").rstrip("/"),
        pricing_api_timeout=timeout,
        customer_api_url=os.getenv("CUSTOMER_API_URL", ""),
        customer_api_key=os.getenv("CUSTOMER_API_KEY", ""),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./miniapp.db"),
        webapp_url=os.getenv("WEBAPP_URL", "https://example.com/webapp"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
