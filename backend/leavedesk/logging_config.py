import logging

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging(level: str) -> None:
    """Configure root logging once for the API or the worker process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
