"""Utilities for normalising webhook URLs."""

WEBHOOK_PATH = "/webhook"


def normalize_webhook_base(raw_url: str) -> str:
    """Return the base URL without trailing slashes or a ``/webhook`` suffix.

    Operators may configure ``WEBHOOK_URL`` with or without the suffix, so the
    effective endpoint is always ``normalize_webhook_base(url) + "/webhook"``.
    """
    normalized = raw_url.strip().rstrip("/")
    if normalized.endswith(WEBHOOK_PATH):
        normalized = normalized[: -len(WEBHOOK_PATH)].rstrip("/")
    return normalized


def webhook_endpoint(raw_url: str) -> str:
    return f"{normalize_webhook_base(raw_url)}{WEBHOOK_PATH}"
