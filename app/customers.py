import logging
from typing import Any, List
import requests
from .utils import normalize_name

logger = logging.getLogger(__name__)

NAME_KEYS = ("name", "client", "customer_name", "title")
LIST_KEYS = ("customers", "data", "items", "results")

MOCK_CUSTOMERS = [
    "Paisan Farm",
    "Richly Trading",
    "Thanya Group",
    "Fourwheel Co.",
    "Global Ace",
    "Blue Ocean Logistics",
    "Metro Dynamics",
    "Crescent Holdings",
]


def mock_customers() -> List[str]:
    return list(MOCK_CUSTOMERS)


def _item_name(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        for key in NAME_KEYS:
            if isinstance(item.get(key), str):
                return item[key]
    return ""


def extract_names(payload: Any) -> List[str]:
    """Pull customer names out of whatever shape the customer API returns."""
    if isinstance(payload, list):
        names = (normalize_name(_item_name(item)) for item in payload)
        return [n for n in names if n]
    if isinstance(payload, dict):
        for key in LIST_KEYS:
            if isinstance(payload.get(key), list):
                return extract_names(payload[key])
    return []


def fetch_customers(url: str, api_key: str, timeout: float = 10) -> List[str]:
    if not api_key or not url:
        logger.info("No customer API configured, using mock customers")
        return mock_customers()

    try:
        r = requests.get(url, headers={"Accept": "application/json", "x-api-key": api_key}, timeout=timeout)
    except requests.RequestException as e:
        logger.error("Error fetching customers: %s", e)
        return mock_customers()

    if not r.ok:
        logger.error("Failed to fetch customers: %s", r.status_code)
        return mock_customers()

    try:
        names = extract_names(r.json())
    except ValueError as e:
        logger.error("Customer API returned invalid JSON: %s", e)
        return mock_customers()

    logger.info("Fetched %d customers", len(names))
    return names
