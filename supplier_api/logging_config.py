from __future__ import annotations

import logging

APP_LOGGER = "supplier_api"


def configure_app_logging(level: str = "INFO") -> None:
    """
    Apply ``APP_LOG_LEVEL`` to the supplier-api loggers.

    Authorization logging by level:
    - DEBUG: every evaluator decision (``supplier_api.abac.evaluator``).
    - INFO: HTTP denials with their reason (``supplier_api.security.dependencies``)
      and policy replacements.
    - WARNING: failing predicates and incomplete role lookups.

    Handlers are left to the ASGI server; records propagate to the root logger.
    """

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level.upper())
    logger.propagate = True
