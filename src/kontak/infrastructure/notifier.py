"""Notifier adapters."""

import logging

logger = logging.getLogger("kontak.notifications")


class LoggingNotifier:
    """Writes user-facing notifications to the log."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)
