"""Cooperative cancellation for long-running discovery runs"""

import threading


class CancellationManager:
    """Thread-safe cancellation flag shared between a caller and a discovery run."""

    def __init__(self):
        self._event = threading.Event()

    def check_cancelled(self):
        """Check if cancellation has been requested"""
        return self._event.is_set()

    def cancel(self):
        """Signal cancellation"""
        self._event.set()

    def reset(self):
        """Reset cancellation state"""
        self._event.clear()
