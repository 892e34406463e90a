"""Process-wide flag recording whether JSON logging has been installed."""

_configured = False


def is_configured() -> bool:
    return _configured


def mark_configured():
    """Called by edge_shared.logging.json.configure_logging."""
    global _configured
    _configured = True
