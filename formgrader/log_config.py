from __future__ import annotations

import logging

import watchtower

from .aws_clients import logs_client
from .config import Settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_cloudwatch_logging(settings: Settings) -> bool:
    """Attach a CloudWatch handler to the root logger; False if unavailable."""
    if not settings.cloudwatch_log_group:
        return False
    try:
        handler = watchtower.CloudWatchLogHandler(
            log_group_name=settings.cloudwatch_log_group,
            boto3_client=logs_client(settings.aws_region),
            create_log_group=True,
        )
    except Exception as e:
        # CloudWatch is optional; keep logging to stderr.
        logger.warning(f"CloudWatch logging unavailable: {type(e).__name__}: {str(e)}")
        return False
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)
    logger.info(f"CloudWatch logging enabled for log group {settings.cloudwatch_log_group}")
    return True


def setup_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(settings.log_level)
    setup_cloudwatch_logging(settings)
