import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger("civicwatch")
    root.setLevel(level)
    if any(getattr(handler, "_civicwatch", False) for handler in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._civicwatch = True  # type: ignore[attr-defined]
    root.addHandler(handler)
