"""
Fallback Replies - Generic replies used when no rule matches
============================================================
"""

from typing import Iterable, List

from core.exceptions import ConfigError


class FallbackCycler:
    """
    Cycles through a fixed list of replies.

    Each call to ``next()`` returns the reply at the cursor and moves
    the cursor on by one, wrapping around at the end of the list.

    Example:
        fallbacks = FallbackCycler(["Please go on.", "Tell me more."])
        fallbacks.next()  # "Please go on."
        fallbacks.next()  # "Tell me more."
        fallbacks.next()  # "Please go on."
    """

    def __init__(self, replies: Iterable[str]):
        """
        Initialize the cycler.

        Args:
            replies: Replies in the order they should be used

        Raises:
            ConfigError: If no replies are given
        """
        self.replies: List[str] = list(replies)
        if not self.replies:
            raise ConfigError("Fallback list cannot be empty")
        self.index = 0

    def __len__(self) -> int:
        return len(self.replies)

    def next(self) -> str:
        reply = self.replies[self.index]
        self.index = (self.index + 1) % len(self.replies)
        return reply

    def reset(self) -> None:
        self.index = 0
