"""Common base for the analysis services."""

from __future__ import annotations

import logging

from vegtrend.core.logger import Logger


class BaseService:
    """
    Holds the logger a service reports progress on.

    Without an injected logger, one named after the concrete service's
    module is used (e.g. ``vegtrend.services.zonal``).
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or Logger.get_logger(type(self).__module__)
