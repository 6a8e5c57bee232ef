"""Configuration values for budgetcore.

Everything here can be overridden through environment variables so the
same code can run behind an API server, a cron job that mails digests,
or a test suite.
"""

import logging
import os
from decimal import Decimal

# Budget status thresholds, in percent of the declared amount
WARNING_THRESHOLD = Decimal(os.getenv("BUDGETCORE_WARNING_THRESHOLD", "80"))
CRITICAL_THRESHOLD = Decimal(os.getenv("BUDGETCORE_CRITICAL_THRESHOLD", "100"))

CURRENCY_SYMBOL = os.getenv("BUDGETCORE_CURRENCY_SYMBOL", "$")

# How far back /spending-trends looks when no months are given
DEFAULT_TREND_MONTHS = int(os.getenv("BUDGETCORE_TREND_MONTHS", "6"))

LOG_LEVEL = os.getenv("BUDGETCORE_LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = None) -> None:
    """Install a basic stderr handler for command line use."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
