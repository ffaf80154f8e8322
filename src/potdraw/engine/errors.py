"""Draw and scheduling failures."""

from __future__ import annotations


class DrawError(RuntimeError):
    """Base class for draw engine failures."""


class UnsatisfiableConstraints(DrawError):
    """No pairing graph satisfies the pot quotas.

    Raised after the randomized attempts and the deterministic fallback have
    both failed, which means the configuration itself is impossible (e.g. a
    pot of one team with a quota of two).
    """


class NoFeasibleSchedule(DrawError):
    """The pairing graph could not be split into complete rounds."""


class InconsistentGraph(DrawError):
    """The supplied matches disagree with the quotas of the pairing graph."""
