"""
Supply unlock schedule.

Provides:
  - Checkpoint          : one scheduled unlock
  - CheckpointSchedule  : cumulative unlocked fraction over time
  - build_checkpoints   : offsets → absolute activation times
  - DEFAULT_CHECKPOINTS : bundled AHA unlock table
"""

from .checkpoints import Checkpoint, CheckpointSchedule, build_checkpoints
from .data import DEFAULT_CHECKPOINTS

__all__ = [
    "Checkpoint",
    "CheckpointSchedule",
    "build_checkpoints",
    "DEFAULT_CHECKPOINTS",
]
