from .debug import format_args, get_debug_logs, print_logs
from .helpers import new_array, random_int, seconds_in_the_future, time_in_secs

__all__ = [
    "format_args",
    "get_debug_logs",
    "print_logs",
    "new_array",
    "random_int",
    "seconds_in_the_future",
    "time_in_secs",
]
