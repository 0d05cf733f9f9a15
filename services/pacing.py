"""
Reply Pacing - Presentation helpers for chat front ends
=======================================================

The responder returns full replies immediately. Front ends use these
helpers to make the doctor feel like it is typing: a pause before the
reply, then one character at a time, and a rotating input placeholder
until the conversation starts.
"""

import asyncio
import time
from typing import AsyncIterator, Awaitable, Callable, Iterable, List

from core.exceptions import UIError


class HintRotator:
    """
    Cycles through input placeholder hints.

    Example:
        hints = HintRotator(["Tell me about your family…"])
        hints.next()
    """

    def __init__(self, hints: Iterable[str]):
        self.hints: List[str] = list(hints)
        if not self.hints:
            raise UIError("At least one hint is required")
        self.index = 0

    def next(self) -> str:
        hint = self.hints[self.index]
        self.index = (self.index + 1) % len(self.hints)
        return hint


def type_out(
    text: str,
    write: Callable[[str], object],
    interval: float = 0.05,
    sleep: Callable[[float], object] = time.sleep
) -> None:
    """
    Write text one character at a time.

    Args:
        text: Text to write
        write: Called with each character
        interval: Pause after each character (seconds)
        sleep: Sleep function
    """
    for char in text:
        write(char)
        if interval:
            sleep(interval)


async def stream_reply(
    text: str,
    delay: float = 1.5,
    interval: float = 0.05,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep
) -> AsyncIterator[str]:
    """
    Yield a reply one character at a time.

    Args:
        text: Reply text
        delay: Pause before the first character (seconds)
        interval: Pause between characters (seconds)
        sleep: Async sleep function
    """
    if delay:
        await sleep(delay)
    for position, char in enumerate(text):
        if position and interval:
            await sleep(interval)
        yield char
