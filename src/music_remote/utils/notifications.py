"""
Standardized Notifications for the Music Remote
===============================================

This module provides the transient, non-blocking notifications shown to the
user for every command dispatch, connection loss and reconnect attempt.
It is the single error surface exposed to the user.

Templates available:
- Success notifications
- Error notifications
- Warning notifications
- Informational notifications
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from music_remote.utils.constants import ICONS


class Severity(Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    severity: Severity = Severity.INFO

    def render(self) -> str:
        """Single line form with the severity icon, for console output."""
        icon = ICONS[self.severity.name]
        if self.description:
            return f"{icon} {self.title}: {self.description}"
        return f"{icon} {self.title}"


Notifier = Callable[[Notification], None]


def create_success_notification(title: Optional[str] = None, description: str = "") -> Notification:
    """
    Create a success notification.

    Args:
        title: Optional title. Defaults to "Success"
        description: Main message content

    Returns:
        Notification: Success notification
    """
    return Notification(title or "Success", description, Severity.SUCCESS)


def create_error_notification(title: Optional[str] = None, description: str = "") -> Notification:
    """
    Create an error notification.

    Args:
        title: Optional title. Defaults to "Error"
        description: Main message content

    Returns:
        Notification: Error notification
    """
    return Notification(title or "Error", description, Severity.ERROR)


def create_warning_notification(title: Optional[str] = None, description: str = "") -> Notification:
    """Create a warning notification, titled "Warning" by default."""
    return Notification(title or "Warning", description, Severity.WARNING)


def create_info_notification(title: Optional[str] = None, description: str = "") -> Notification:
    """Create an informational notification, titled "Information" by default."""
    return Notification(title or "Information", description, Severity.INFO)


_LEVELS = {
    Severity.SUCCESS: logging.INFO,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class LoggingNotifier:
    """Default notifier: writes each notification to a dedicated logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("music_remote.notifications")

    def __call__(self, notification: Notification) -> None:
        self.logger.log(_LEVELS[notification.severity], notification.render())


def safe_notify(notifier: Optional[Notifier], notification: Notification,
                logger: Optional[logging.Logger] = None) -> None:
    """Deliver a notification, logging (not raising) if the notifier fails."""
    if notifier is None:
        return
    try:
        notifier(notification)
    except Exception as e:
        (logger or logging.getLogger(__name__)).error(f"Error delivering notification: {e}")
