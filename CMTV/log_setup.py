import logging
import os

LOG_DIR = "app_log"
LOG_FILE = "cmtv.log"


def configure_logging(log_dir: str = LOG_DIR, level: int = logging.INFO) -> str:
    """
    Send application logs to a file under *log_dir*

    The terminal belongs to the UI, so nothing is written to stderr.

    Returns:
        Path of the log file
    """
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    log_path = os.path.join(log_dir, LOG_FILE)
    logging.basicConfig(
        filename=log_path,
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return log_path
