import logging

LOGGER_NAME = "amm_engine"


def setup_logger(level: int = logging.INFO) -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(level)

    if not log.handlers:
        sh = logging.StreamHandler()
        sh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        log.addHandler(sh)

    return log
