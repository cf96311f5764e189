# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging helpers for the invite mail service.

Handlers, level and format are configured once through
``logging.basicConfig()`` in the entry point (see :func:`configure_logging`),
modules only ask for named loggers.

Example:
    Typical usage in a module::

        from invite_mail_service.logger import get_logger

        logger = get_logger("Mailer")
        logger.info("Invite delivered")
"""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "InviteMailService") -> logging.Logger:
    """Return a :class:`logging.Logger` bound to ``name``.

    No handlers are attached here; that is the entry point's job.
    """
    return logging.getLogger(name)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger for the running process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        force=True,  # Force reconfiguration to avoid duplicate handlers
    )
