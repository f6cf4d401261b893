import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configura el logging raíz una sola vez (idempotente)."""
    root = logging.getLogger()
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    if not any(getattr(h, "_cdf_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._cdf_handler = True
        root.addHandler(handler)

    root.setLevel(numeric_level)
