import sys
from typing import Any, TextIO

from loguru import logger

from quizgate.core.config import Settings

PLAIN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(settings: Settings, sink: TextIO | Any = sys.stdout):
    """
    One sink for the whole process. Production emits one JSON object per
    line for the log collector; other environments get readable lines.
    """
    logger.remove()
    production = settings.APP_ENV.lower() == "production"
    logger.add(
        sink,
        level=settings.LOG_LEVEL.upper(),
        format=PLAIN_FORMAT,
        serialize=production,
        backtrace=not production,
        # locals in tracebacks could hold tokens or passwords
        diagnose=False,
        enqueue=True,
    )
    return logger.bind(app=settings.APP_NAME, env=settings.APP_ENV)
