from __future__ import annotations
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """
    Configure root logging for example scripts.

    Library modules only create their own loggers; handlers are installed here, once, by whoever runs the code.

    :param level: Logging level (e.g. logging.INFO or "DEBUG").
        :type level: int | str

    :return: None.
        :rtype: None
    """
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S")
