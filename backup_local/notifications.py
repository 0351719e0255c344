"""Push-monitor heartbeat sent after each backup run."""

import logging
import time
import urllib.parse
import urllib.request
from typing import Optional


def _make_request(url: str, logger: logging.Logger) -> bool:
    """Make HTTP request, return True on success, False on failure."""
    try:
        with urllib.request.urlopen(url, timeout=10) as response:
            if response.getcode() < 400:
                return True
            logger.warning(f"Monitor notification failed with HTTP {response.getcode()}")
            return False
    except Exception as e:
        logger.warning(f"Monitor notification failed: {e}")
        return False


def send_monitor_notification(
    base_url: str,
    status: str,
    message: str,
    retry_delay: float = 120,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Send a push notification to a monitoring service (e.g. Uptime Kuma).

    Args:
        base_url: Push URL of the monitor
        status: Either "up" for success or "down" for failure
        message: Simple message like "OK" or "FAILED"
        retry_delay: Seconds to wait before the single retry
        logger: Logger for failures, defaults to this module's logger

    Returns:
        True if either attempt was accepted
    """
    logger = logger or logging.getLogger(__name__)

    params = {"status": status, "msg": message, "ping": ""}
    separator = "&" if "?" in base_url else "?"
    full_url = f"{base_url}{separator}{urllib.parse.urlencode(params)}"

    if _make_request(full_url, logger):
        logger.debug(f"Monitor notification sent: status={status}, msg={message}")
        return True

    logger.info(f"Monitor notification failed, retrying in {retry_delay:g} seconds...")
    time.sleep(retry_delay)

    if _make_request(full_url, logger):
        logger.info(f"Monitor notification sent on retry: status={status}, msg={message}")
        return True

    logger.error("Monitor notification failed on retry, giving up")
    return False
