'''
universal logger
'''
import logging
import sys


def setup_logger(level: str = "INFO"):
    """
    Configures and returns the application logger.
    """
    logger = logging.getLogger('lecture-settlement')
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)

    formatter = logging.Formatter(
        '%(asctime)s - %(module)s - %(levelname)s - %(message)s'
    )
    handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(handler)

    return logger


# Single logger instance imported by other modules
log = setup_logger()
