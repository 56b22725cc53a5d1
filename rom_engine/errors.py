"""Contract errors raised by the engine.

Frame-level anomalies (missing landmarks, degenerate geometry) are never
raised; they surface as invalid samples or ``None`` results.  Only
structurally invalid input is rejected with an exception.
"""


class LandmarkContractError(ValueError):
    """A frame was built with the wrong number of landmarks or bad metadata."""


class ProfileError(ValueError):
    """An injury profile table is malformed."""
