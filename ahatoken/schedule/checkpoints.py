"""
Checkpoint Schedule

Ordered, append-once table of supply unlock events. Each checkpoint releases
a fraction of max supply (in tenths of a percent) once its activation time
has passed. Together with the fraction minted at deployment the schedule
always accounts for exactly 100.0% of max supply.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..constants import FRACTION_DENOMINATOR, MAX_UNLOCK_FRACTION, MIN_UNLOCK_FRACTION
from ..exceptions import ScheduleError
from ..logger import get_logger

logger = get_logger(__name__)

CheckpointTuple = Tuple[int, str, int]


@dataclass(frozen=True)
class Checkpoint:
    """
    A scheduled unlock.

    Fields:
        unlock_fraction:  Tenths of a percent of max supply released (1-1000)
        note:             Free-form label ("presale", "VC unlock", ...)
        activation_time:  Unix timestamp (seconds) at which it counts
    """
    unlock_fraction: int
    note: str
    activation_time: int

    @classmethod
    def from_tuple(cls, row: Sequence[Any]) -> "Checkpoint":
        """Build from the ``(activation_time, note, unlock_fraction)`` call format."""
        if len(row) != 3:
            raise ScheduleError(f"Checkpoint needs 3 fields, got {len(row)}")
        activation_time, note, unlock_fraction = row
        return cls(
            unlock_fraction=int(unlock_fraction),
            note=str(note),
            activation_time=int(activation_time),
        )

    def as_tuple(self) -> CheckpointTuple:
        return (self.activation_time, self.note, self.unlock_fraction)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unlockFraction": self.unlock_fraction,
            "note": self.note,
            "activationTime": self.activation_time,
        }


def build_checkpoints(
    rows: Iterable[Tuple[int, str, int]],
    now: int,
) -> List[CheckpointTuple]:
    """
    Turn ``(seconds_from_now, note, point_one_percent)`` rows into call tuples.

    ``now`` is captured once by the caller when the scenario is built; every
    activation time is an absolute snapshot, not a lazy offset.
    """
    return [
        (now + int(seconds_from_now), str(note), int(point_one_percent))
        for seconds_from_now, note, point_one_percent in rows
    ]


class CheckpointSchedule:
    """
    Cumulative unlock schedule.

    The initial fraction is fixed at construction; ``register`` may be called
    exactly once. Before registration only the initial fraction is unlocked.
    """

    def __init__(self, initial_fraction: int):
        if not 0 <= initial_fraction <= FRACTION_DENOMINATOR:
            raise ScheduleError(
                f"Initial fraction must be 0-{FRACTION_DENOMINATOR}, got {initial_fraction}"
            )
        self.initial_fraction = initial_fraction
        self._checkpoints: List[Checkpoint] = []
        self._times: List[int] = []
        # Running sums aligned with _checkpoints, initial fraction included
        self._cumulative: List[int] = []
        self._registered = False

    # ── Registration ──────────────────────────────────────────────────

    def register(self, checkpoints: Sequence[Union[Checkpoint, Sequence[Any]]]) -> None:
        """
        Register the full schedule.

        Raises:
            ScheduleError: already registered, non-increasing activation
                times, fraction out of range, or totals not equal to 100%
        """
        if self._registered:
            raise ScheduleError("Checkpoints already registered")

        parsed = [
            cp if isinstance(cp, Checkpoint) else Checkpoint.from_tuple(cp)
            for cp in checkpoints
        ]

        times: List[int] = []
        cumulative: List[int] = []
        total = self.initial_fraction
        previous: Optional[int] = None
        for i, cp in enumerate(parsed):
            if not MIN_UNLOCK_FRACTION <= cp.unlock_fraction <= MAX_UNLOCK_FRACTION:
                raise ScheduleError(
                    f"Checkpoint {i} ({cp.note}) fraction {cp.unlock_fraction} "
                    f"outside {MIN_UNLOCK_FRACTION}-{MAX_UNLOCK_FRACTION}"
                )
            if previous is not None and cp.activation_time <= previous:
                raise ScheduleError(
                    f"Checkpoint {i} ({cp.note}) activates at {cp.activation_time}, "
                    f"not after previous {previous}"
                )
            total += cp.unlock_fraction
            if total > FRACTION_DENOMINATOR:
                raise ScheduleError(
                    f"Cumulative unlock {total} exceeds {FRACTION_DENOMINATOR} at checkpoint {i}"
                )
            previous = cp.activation_time
            times.append(cp.activation_time)
            cumulative.append(total)

        if total != FRACTION_DENOMINATOR:
            raise ScheduleError(
                f"Schedule unlocks {total}/{FRACTION_DENOMINATOR}; "
                f"must account for the full max supply"
            )

        self._checkpoints = parsed
        self._times = times
        self._cumulative = cumulative
        self._registered = True
        logger.info(
            f"Checkpoint schedule registered: {len(parsed)} checkpoints, "
            f"initial={self.initial_fraction}"
        )

    # ── Queries ───────────────────────────────────────────────────────

    @property
    def is_registered(self) -> bool:
        return self._registered

    @property
    def checkpoints(self) -> List[Checkpoint]:
        return list(self._checkpoints)

    @property
    def total_fraction(self) -> int:
        """Initial fraction plus every registered checkpoint."""
        return self._cumulative[-1] if self._cumulative else self.initial_fraction

    def unlocked_fraction(self, at: int) -> int:
        """Fraction (tenths of a percent) unlocked as of timestamp ``at``."""
        passed = bisect_right(self._times, at)
        if passed == 0:
            return self.initial_fraction
        return self._cumulative[passed - 1]

    def next_checkpoint(self, at: int) -> Optional[Checkpoint]:
        """First checkpoint still pending at ``at``, if any."""
        passed = bisect_right(self._times, at)
        if passed < len(self._checkpoints):
            return self._checkpoints[passed]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "initialFraction": self.initial_fraction,
            "registered": self._registered,
            "checkpoints": [cp.to_dict() for cp in self._checkpoints],
        }

    def __repr__(self) -> str:
        return (
            f"<CheckpointSchedule checkpoints={len(self._checkpoints)} "
            f"total={self.total_fraction}>"
        )
