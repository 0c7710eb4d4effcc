# clipfetch/logging_config.py
import logging
import sys

# Chatty libraries that only matter when debugging clipfetch itself.
NOISY_LOGGERS = ("urllib3", "requests")


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    quiet_loggers: tuple[str, ...] = NOISY_LOGGERS,
) -> logging.Logger:
    """
    Configure the root logger to print to stdout.
    If log_file is provided, also log to that file.
    Loggers in quiet_loggers are capped at WARNING unless level is DEBUG.
    """
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info(f"Logging to file: {log_file}")

    if level.upper() != "DEBUG":
        for name in quiet_loggers:
            logging.getLogger(name).setLevel(logging.WARNING)

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.error("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    sys.excepthook = handle_exception

    return logger
