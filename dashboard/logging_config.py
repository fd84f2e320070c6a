import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
QUIET_LOGGERS = ("urllib3", "requests", "streamlit.watcher")


def configure_logging(level=None):
    """Root logging for the Streamlit process.

    MOODLOG_LOG_LEVEL sets the level; MOODLOG_POLLER_LOG_LEVEL can raise or
    lower the store pollers separately since they log on every failed poll.
    """
    level_name = str(level or os.getenv("MOODLOG_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    poller_level = os.getenv("MOODLOG_POLLER_LOG_LEVEL")
    if poller_level:
        logging.getLogger("dashboard.data.store").setLevel(
            getattr(logging, poller_level.upper(), logging.WARNING)
        )
