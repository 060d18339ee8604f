# config.py

"""
Global configuration for the sphere-streams project.

This module centralizes:
  - filesystem paths (checkpoints, reports, logs),
  - the default engine seed,
  - ladder geometry (skip distance, ladder size),
  - default Monte Carlo budgets and worker counts.

main.py uses these values as CLI defaults; library functions take them
as keyword arguments so tests can use tiny budgets.
"""

from __future__ import annotations

from pathlib import Path


# -------------------------------------------------------------------
# Core paths
# -------------------------------------------------------------------

# Root of the project (directory containing main.py, config.py, etc.)
PROJECT_ROOT: Path = Path(__file__).resolve().parent

# Where checkpoints live unless --checkpoint-dir says otherwise
CHECKPOINT_DIR: Path = PROJECT_ROOT / "status"

# Directory for CSV result tables (--save-report)
REPORTS_DIR: Path = PROJECT_ROOT / "reports"

# Directory for logs (if you want to write logs to disk)
LOGS_DIR: Path = PROJECT_ROOT / "logs"


# -------------------------------------------------------------------
# Engine
# -------------------------------------------------------------------

# Seed used by a StreamEngine constructed without arguments.
# Two default engines always produce the same sequence.
DEFAULT_SEED: int = 19780503

# Draws generated per numpy call when advancing or estimating.
CHUNK_SIZE: int = 1_000_000


# -------------------------------------------------------------------
# Checkpoints
# -------------------------------------------------------------------

LADDER_TAG: str = "ladder"
SELFTEST_TAG: str = "selftest"

# Draws between two consecutive ladder checkpoints.
SKIP_DISTANCE: int = 2_000_000_000

# Number of ladder checkpoints to provision.
LADDER_SIZE: int = 10

# Self-test geometry: checkpoints saved, draws recorded after each.
SELFTEST_CHECKPOINTS: int = 10
SELFTEST_DRAWS: int = 10


# -------------------------------------------------------------------
# Monte Carlo settings
# -------------------------------------------------------------------

# Points per estimation (3 draws per point, must stay below SKIP_DISTANCE).
POINTS_PER_ESTIMATE: int = 100_000_000

# Replications in sequential mode.
REPLICATIONS: int = 10

# Workers in parallel mode.
N_WORKERS: int = 4

# Peptide demo target.
PEPTIDE_TARGET: str = "gattaca"
