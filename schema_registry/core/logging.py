import logging
from typing import Any


def setup_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(message)s",
    )


def log_request(data: dict[str, Any]) -> None:
    logger = logging.getLogger("schema_registry.request")
    logger.info(data)


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    logger = logging.getLogger("schema_registry.events")
    logger.log(level, {"event": event, **fields})
