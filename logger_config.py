import logging
import sys

from config import LOG_LEVEL

# Fall back to INFO if LOG_LEVEL is not a valid level name
log_level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)

logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("credit_analyzer")
