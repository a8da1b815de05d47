"""
Push Notification Backends

ExpoPushNotifier posts to the Expo push API. Delivery is best-effort: every
failure mode (transport error, HTTP error, error ticket) is raised as
NotifyError and it is up to the caller to decide that this is non-fatal.
"""
import logging
from typing import Any, Dict, Optional

import requests

from taskboard.core.config import settings
from taskboard.core.exceptions import NotifyError

logger = logging.getLogger(__name__)


class ExpoPushNotifier:
    def __init__(self, url: str = None, timeout: float = None, session: requests.Session = None):
        self.url = url or settings.PUSH_API_URL
        self.timeout = timeout if timeout is not None else settings.PUSH_TIMEOUT_SECONDS
        self.http = session or requests.Session()

    def send(self, address: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> None:
        message = {
            "to": address,
            "sound": "default",
            "title": title,
            "body": body,
            "data": data or {},
        }
        try:
            response = self.http.post(
                self.url,
                json=message,
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            ticket = response.json().get("data") or {}
        except requests.RequestException as exc:
            raise NotifyError(f"Push request failed: {exc}") from exc
        except ValueError as exc:
            raise NotifyError("Push service returned a non-JSON response") from exc

        # A single message yields a single ticket; batches yield a list
        tickets = ticket if isinstance(ticket, list) else [ticket]
        for item in tickets:
            if item.get("status") == "error":
                raise NotifyError(f"Push rejected: {item.get('message', 'unknown error')}")
        logger.debug("Push delivered to %s", address)


class NullNotifier:
    """Used when PUSH_ENABLED is off. Accepts and drops every message."""

    def send(self, address: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> None:
        logger.debug("Push disabled; dropping notification for %s", address)


def get_notifier():
    if not settings.PUSH_ENABLED:
        return NullNotifier()
    return ExpoPushNotifier()
