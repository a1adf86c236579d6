"""Logging configuration helpers."""

import logging

ENGINE_LOGGER = "playground_engine"
CLIENT_LOGGER = "kubernetes_asyncio"


def configure_logging(level: str = "INFO") -> None:
    """Send engine logs to stderr at `level`.

    The Kubernetes client logs every request at debug level, so it is held at
    warning unless a stricter level is asked for.
    """
    engine = logging.getLogger(ENGINE_LOGGER)
    engine.setLevel(level.upper())
    client = logging.getLogger(CLIENT_LOGGER)
    client.setLevel(max(engine.level, logging.WARNING))
    if engine.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    engine.addHandler(handler)
    engine.propagate = False
