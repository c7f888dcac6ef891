import time
from typing import Any, List


def native_clock(args: List[Any]) -> float:
    """Seconds since the epoch, as a Lox number."""
    return time.time()
