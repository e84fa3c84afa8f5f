import logging, json, sys, time, os

_FIELDS = {"ts": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "msg": "%(message)s"}


def _json_formatter():
    formatter = logging.Formatter(fmt=json.dumps(_FIELDS), datefmt="%Y-%m-%dT%H:%M:%SZ")
    formatter.converter = time.gmtime
    return formatter


def get_logger(name="pgpmint", level=None, to_file=None):
    """
    JSON-line logger shared by the generator, certifier and armor codec.

    Level and log file default to PGPMINT_LOG_LEVEL and PGPMINT_LOG_FILE.
    Handlers are attached once per logger name.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level or os.getenv("PGPMINT_LOG_LEVEL", "INFO").upper())
    to_file = to_file or os.getenv("PGPMINT_LOG_FILE")

    if not logger.handlers:
        formatter = _json_formatter()
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def log_warnings(logger, caught):
    """Re-emit warnings recorded around a pgpy call as debug lines."""
    for w in caught:
        logger.debug(f"[PGPY] {w.category.__name__}: {w.message}")
