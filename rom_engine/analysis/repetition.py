"""Repetition containers.

A repetition is a bounded, immutable run of frames.  Frames arriving from a
live stream are buffered by ``RepetitionRecorder`` and only become a
``Repetition`` once recording is explicitly closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .frame import LandmarkFrame


@dataclass(frozen=True)
class Repetition:
    frames: Tuple[LandmarkFrame, ...]
    index: int = 0

    def __post_init__(self):
        object.__setattr__(self, "frames", tuple(self.frames))

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self):
        return iter(self.frames)


class RepetitionRecorder:
    """Collect frames from a growing stream until the repetition is closed."""

    def __init__(self, index: int = 0):
        self.index = index
        self._frames: List[LandmarkFrame] = []
        self._closed: Optional[Repetition] = None

    @property
    def is_closed(self) -> bool:
        return self._closed is not None

    def add(self, frame: LandmarkFrame) -> None:
        if self._closed is not None:
            raise RuntimeError("Cannot add frames to a closed repetition")
        self._frames.append(frame)

    def close(self) -> Repetition:
        """Seal the repetition; calling again returns the same object."""
        if self._closed is None:
            self._closed = Repetition(tuple(self._frames), self.index)
            self._frames = []
        return self._closed

    @property
    def repetition(self) -> Repetition:
        if self._closed is None:
            raise RuntimeError("Repetition is still recording; call close() first")
        return self._closed
