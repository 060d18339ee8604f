# simulation/peptide.py

"""
Random peptide demo.

Each draw u picks `alphabet[int(u * len(alphabet))]`; peptides of the
target's length are drawn until one equals the target. With the default
4-letter alphabet and "gattaca" that takes 4**7 = 16384 attempts on
average.
"""

from __future__ import annotations

import time
from typing import Optional

from config import PEPTIDE_TARGET
from core_types import PeptideSearch
from utils.rng import StreamEngine


DEFAULT_ALPHABET = "gatc"


def generate_peptide(
    engine: StreamEngine,
    length: int,
    alphabet: str = DEFAULT_ALPHABET,
) -> str:
    if length < 0:
        raise ValueError(f"length must be non-negative, got {length}")
    if not alphabet:
        raise ValueError("alphabet must not be empty")

    k = len(alphabet)
    return "".join(alphabet[int(u * k)] for u in engine.draw_many(length))


def search_peptide(
    engine: StreamEngine,
    target: str = PEPTIDE_TARGET,
    alphabet: str = DEFAULT_ALPHABET,
    max_attempts: Optional[int] = None,
) -> PeptideSearch:
    """
    Draw peptides until `target` comes up.

    Raises:
        ValueError: `target` uses letters outside `alphabet`.
        RuntimeError: `max_attempts` peptides were drawn without a match.
    """
    if not target:
        raise ValueError("target must not be empty")
    unknown = set(target) - set(alphabet)
    if unknown:
        raise ValueError(f"target uses letters not in {alphabet!r}: {sorted(unknown)}")

    t0 = time.perf_counter()
    attempts = 0
    while True:
        if max_attempts is not None and attempts >= max_attempts:
            raise RuntimeError(f"{target!r} not found in {max_attempts} attempts")
        peptide = generate_peptide(engine, len(target), alphabet)
        attempts += 1
        if peptide == target:
            break

    return PeptideSearch(
        peptide=peptide,
        attempts=attempts,
        elapsed_s=time.perf_counter() - t0,
        target=target,
    )
