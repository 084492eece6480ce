import logging


LOG_FORMAT = '[{levelname}] [{asctime}] {message}'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

logger = logging.getLogger("freeplay")


def setup_logging(log_file: str | None = None, level: str = "INFO"):
    """
    Attach the app wide handler to the freeplay logger.
    Logs go to log_file when given, stderr otherwise.
    :param log_file:
    :param level:
    :return:
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT, style='{'))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    return logger
