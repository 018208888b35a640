"""
Scenario helpers: timestamps, random amounts and list builders.
"""

import math
import random
import time
from typing import Callable, List, Optional, TypeVar

from ..ledger.clock import Clock

T = TypeVar("T")


def time_in_secs(clock: Optional[Clock] = None) -> int:
    """Current time in whole seconds."""
    if clock is not None:
        return clock.now()
    return round(time.time())


def seconds_in_the_future(seconds: int, clock: Optional[Clock] = None) -> int:
    """Timestamp ``seconds`` from now, truncated to whole seconds."""
    now = clock.now() if clock is not None else int(time.time())
    return now + seconds


def random_int(minimum: int, maximum: int, rng: Optional[random.Random] = None) -> int:
    """
    Random integer in ``[minimum, maximum]``.

    ``minimum`` itself only comes up when the generator returns exactly 0.
    """
    if maximum < minimum:
        raise ValueError(f"maximum {maximum} < minimum {minimum}")
    rng = rng or random
    return minimum + math.ceil(rng.random() * (maximum - minimum))


def new_array(length: int, callback: Callable[[int], T]) -> List[T]:
    """``[callback(0), ..., callback(length - 1)]``."""
    return [callback(i) for i in range(length)]
