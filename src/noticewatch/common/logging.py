"""Shared logging helpers for noticewatch."""

from __future__ import annotations

import logging

# httpx logs every request URL at INFO, and Bot API URLs embed the bot token.
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    A relay cycle usually runs from cron or a systemd timer, so the format keeps
    the full date. Pass ``force=True`` to reconfigure during tests or
    specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
