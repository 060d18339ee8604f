# core_types.py

"""
Shared type definitions and core dataclasses for the sphere-streams project.

This module is intentionally small so it can be imported from anywhere
(state/, simulation/, utils/, main.py) without risk of circular imports.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from errors import CorruptState


# ---------- Basic aliases ----------

# A checkpoint is addressed by a ladder ordinal or a free-form name.
CheckpointId = Union[int, str]

# Volume of the cube [-1, 1]^3 that encloses the unit sphere.
CUBE_VOLUME: float = 8.0

# Exact unit-sphere volume, 4/3 * pi.
SPHERE_VOLUME: float = 4.0 / 3.0 * math.pi

# MT19937 geometry
MT_STATE_WORDS: int = 624
MT_ENGINE_NAME: str = "MT19937"


# ---------- Core dataclasses ----------


@dataclass(frozen=True)
class StreamState:
    """
    Full internal state of a StreamEngine at one point of its sequence.

    Two equal StreamStates produce identical future draws. Instances are
    immutable; build them with `StreamEngine.capture_state()` or
    `StreamState.from_mapping()` and hand them to `install_state()`.
    """

    # Mersenne Twister key, 624 unsigned 32-bit words
    key: Tuple[int, ...]

    # Index of the next word to temper, 0..624 (624 means "regenerate first")
    pos: int

    # numpy's buffered half of a 64-bit output (unused by float draws)
    has_uint32: int = 0
    uinteger: int = 0

    def validate(self) -> None:
        """Raise CorruptState unless this describes a usable MT19937 state."""
        if len(self.key) != MT_STATE_WORDS:
            raise CorruptState(
                f"state key must hold {MT_STATE_WORDS} words, got {len(self.key)}"
            )
        for word in self.key:
            if isinstance(word, bool) or not isinstance(word, int):
                raise CorruptState(f"state key word {word!r} is not an integer")
            if not 0 <= word < 2**32:
                raise CorruptState(f"state key word {word} is out of 32-bit range")
        if not any(self.key):
            raise CorruptState("state key is all zeros")
        if isinstance(self.pos, bool) or not isinstance(self.pos, int):
            raise CorruptState(f"state position {self.pos!r} is not an integer")
        if not 0 <= self.pos <= MT_STATE_WORDS:
            raise CorruptState(f"state position {self.pos} is out of range")
        if self.has_uint32 not in (0, 1):
            raise CorruptState(f"has_uint32 must be 0 or 1, got {self.has_uint32!r}")
        if isinstance(self.uinteger, bool) or not isinstance(self.uinteger, int) \
                or not 0 <= self.uinteger < 2**32:
            raise CorruptState(f"uinteger {self.uinteger!r} is out of 32-bit range")

    def to_mapping(self) -> dict:
        """Plain-JSON form used by the checkpoint store."""
        return {
            "engine": MT_ENGINE_NAME,
            "pos": self.pos,
            "has_uint32": self.has_uint32,
            "uinteger": self.uinteger,
            "key": list(self.key),
        }

    @classmethod
    def from_mapping(cls, raw: object) -> "StreamState":
        """
        Rebuild a StreamState from `to_mapping()` output.

        Any structural problem (missing field, wrong engine, bad words)
        raises CorruptState.
        """
        if not isinstance(raw, dict):
            raise CorruptState(f"state must be a mapping, got {type(raw).__name__}")
        if raw.get("engine") != MT_ENGINE_NAME:
            raise CorruptState(f"unsupported engine {raw.get('engine')!r}")
        try:
            key = raw["key"]
            pos = raw["pos"]
        except KeyError as exc:
            raise CorruptState(f"state is missing field {exc.args[0]!r}") from exc
        if not isinstance(key, list):
            raise CorruptState("state key must be a list of integers")

        state = cls(
            key=tuple(key),
            pos=pos,
            has_uint32=raw.get("has_uint32", 0),
            uinteger=raw.get("uinteger", 0),
        )
        state.validate()
        return state


@dataclass(frozen=True)
class EstimationResult:
    """
    Outcome of one rejection-sampling run over one substream.
    """

    # Sphere-volume estimate, always within [0, CUBE_VOLUME]
    estimate: float

    # Wall-clock time spent estimating (seconds)
    elapsed_s: float

    # Points sampled (3 draws each) and how many landed inside the sphere
    points: int
    hits: int

    # Checkpoint the engine was restored from, if any
    origin: Optional[CheckpointId] = None

    @property
    def hit_ratio(self) -> float:
        return self.hits / self.points

    @property
    def std_error(self) -> float:
        """Binomial standard error of `estimate`."""
        p = self.hit_ratio
        return CUBE_VOLUME * math.sqrt(p * (1.0 - p) / self.points)


@dataclass
class SequentialReport:
    """
    R replications run back to back on one continuing engine.
    """

    results: List[EstimationResult]
    elapsed_s: float

    @property
    def estimate(self) -> float:
        return sum(r.estimate for r in self.results) / len(self.results)


@dataclass
class ParallelReport:
    """
    Combined outcome of a parallel batch.

    `results` holds one entry per worker for worker-owned strategies and a
    single combined entry for the shared-reduction strategy.
    """

    strategy: str
    results: List[EstimationResult]
    elapsed_s: float

    @property
    def estimate(self) -> float:
        return sum(r.estimate for r in self.results) / len(self.results)


@dataclass
class PeptideSearch:
    """
    Result of drawing random peptides until a target string appears.
    """

    peptide: str
    attempts: int
    elapsed_s: float
    target: str = field(default="")
