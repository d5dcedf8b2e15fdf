"""
Logging setup shared by the API server and the CLI.

Modules log through `logging.getLogger(__name__)`; this only wires the root
handler once per process.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    """
    Configure root logging for the process.

    Args:
        level: Logging level name (default from settings)
    """
    if level is None:
        from oneplace.config import settings

        level = settings.log_level

    root = logging.getLogger()
    root.setLevel(level)

    # Reconfiguring under uvicorn --reload must not stack handlers
    if not any(getattr(h, "_oneplace", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._oneplace = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # httpx logs every request URL at INFO, which includes the API key
    logging.getLogger("httpx").setLevel(logging.WARNING)
