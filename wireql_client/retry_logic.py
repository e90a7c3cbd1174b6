"""
Reconnect backoff for the WireQL WebSocket channel
Only the connection is retried; individual queries never are
"""

from typing import Optional

DEFAULT_INITIAL_DELAY = 1000
DEFAULT_MAX_DELAY = 30000
DEFAULT_MAX_ATTEMPTS = 10


class ReconnectStrategy:
    """Exponential backoff schedule for reconnect attempts"""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        initial_delay: int = DEFAULT_INITIAL_DELAY,
        max_delay: int = DEFAULT_MAX_DELAY,
        backoff_multiplier: float = 2.0,
    ):
        """
        Initialize reconnect strategy

        Args:
            max_attempts: Attempts allowed before reconnecting stops
            initial_delay: Delay before the first attempt in milliseconds
            max_delay: Upper bound for any delay in milliseconds
            backoff_multiplier: Growth factor between attempts
        """
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.backoff_multiplier = backoff_multiplier

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay for a given attempt

        Args:
            attempt: Attempt number (1-indexed)

        Returns:
            float: Delay in milliseconds
        """
        delay = self.initial_delay * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_delay)

    def can_attempt(self, attempts_made: int) -> bool:
        """True while another attempt may be scheduled"""
        return attempts_made < self.max_attempts

    def next_delay(self, attempts_made: int) -> Optional[float]:
        """Delay for the attempt after ``attempts_made``, or None once exhausted"""
        if not self.can_attempt(attempts_made):
            return None
        return self.calculate_delay(attempts_made + 1)
