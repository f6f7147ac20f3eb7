import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler

from config import LogConfiguration, app_config


def get_logger() -> logging.Logger:
    """
    Build the application logger once: console output plus a file rotated at midnight.
    """
    logger = logging.getLogger(LogConfiguration.logger_name)
    if logger.handlers:
        return logger

    logger.setLevel(app_config.LOG_LEVEL.upper())
    formatter = logging.Formatter(LogConfiguration.logger_formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    try:
        os.makedirs(LogConfiguration.log_file_base_dir, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=os.path.join(LogConfiguration.log_file_base_dir, LogConfiguration.log_file_base_name),
            when=LogConfiguration.roll_over,
            backupCount=LogConfiguration.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"File logging disabled: {e}")

    logger.propagate = False
    return logger


app_logger = get_logger()
