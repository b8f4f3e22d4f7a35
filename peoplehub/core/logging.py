import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Chatty at INFO: the Cosmos SDK logs every HTTP request and response
_NOISY_LOGGERS = ("azure.core.pipeline.policies.http_logging_policy", "azure.cosmos")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup; module loggers propagate to it."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging initialized with level %s", level)
