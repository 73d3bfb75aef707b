"""
callbacks.py - callback helpers
Single responsibility: invoke UI callbacks without letting them break a tick.
"""
import logging

logger = logging.getLogger(__name__)


def safe_call(callback, *args) -> None:
    if callback is None:
        return
    try:
        callback(*args)
    except Exception:
        logger.warning("Callback %r failed", callback, exc_info=True)
