"""
Bundled AHA unlock table.

Rows are ``(seconds_from_now, note, point_one_percent)``. The fractions sum
to 700, leaving 300 (30.0%) for the mint at deployment. Offsets are
compressed to seconds so scenarios can observe several checkpoints pass.
"""

DEFAULT_CHECKPOINTS = (
    (1, "presale", 50),
    (2, "private sale", 10),
    (3, "annual rewards", 2),
    (5, "annual rewards", 4),
    (18, "VC unlock", 200),
    (24, "team allocation", 20),
    (27, "annual rewards", 8),
    (30, "VC final unlock", 200),
    (36, "team allocation", 20),
    (39, "annual rewards", 16),
    (51, "annual rewards", 32),
    (73, "annual rewards", 38),
    (85, "annual rewards", 50),
    (97, "annual rewards", 50),
)
