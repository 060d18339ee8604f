# state/checkpoint_store.py

"""
Persistent storage for StreamState checkpoints.

Each checkpoint is one JSON file:

    <root>/<tag>_<identity>.json

where `tag` names a generation of checkpoints ("ladder", "selftest", ...)
and `identity` is a ladder ordinal or a free-form name. The document
looks like:

    {
      "format": 1,
      "engine": "MT19937",
      "pos": 624,
      "has_uint32": 0,
      "uinteger": 0,
      "key": [1791095845, 4282876139, ...]
    }

Integers in JSON read back identically on any platform, so a ladder built
on one machine can be consumed on another.

A missing or corrupt checkpoint is always an error; there is no default
state to fall back to.
"""

from __future__ import annotations

import contextlib
import json
import operator
import os
import re
from pathlib import Path
from typing import List, Optional

from config import CHECKPOINT_DIR, LADDER_TAG
from core_types import CheckpointId, StreamState
from errors import CheckpointIOError, CheckpointNotFound, CorruptState
from utils.logging_utils import get_logger


FORMAT_VERSION: int = 1

_NAME_RE = re.compile(r"^[0-9A-Za-z][0-9A-Za-z_.-]*$")

logger = get_logger(__name__)


def _identity_str(identity: CheckpointId) -> str:
    if isinstance(identity, str):
        if _NAME_RE.match(identity):
            return identity
        raise ValueError(f"invalid checkpoint identity {identity!r}")
    if isinstance(identity, bool):
        raise ValueError(f"invalid checkpoint identity {identity!r}")

    # Any integer-like ordinal, numpy integers included
    try:
        ordinal = operator.index(identity)
    except TypeError:
        raise ValueError(f"invalid checkpoint identity {identity!r}") from None
    if ordinal < 0:
        raise ValueError(f"checkpoint ordinal must be >= 0, got {ordinal}")
    return str(ordinal)


class CheckpointStore:
    """
    Directory-backed store of StreamState checkpoints under one tag.
    """

    def __init__(self, root: Optional[Path] = None, tag: str = LADDER_TAG) -> None:
        if not _NAME_RE.match(tag):
            raise ValueError(f"invalid checkpoint tag {tag!r}")
        self.root = Path(root) if root is not None else CHECKPOINT_DIR
        self.tag = tag

    def __repr__(self) -> str:
        return f"CheckpointStore(root={str(self.root)!r}, tag={self.tag!r})"

    def with_tag(self, tag: str) -> "CheckpointStore":
        """Same directory, different generation of checkpoints."""
        return CheckpointStore(self.root, tag)

    def path_for(self, identity: CheckpointId) -> Path:
        return self.root / f"{self.tag}_{_identity_str(identity)}.json"

    def exists(self, identity: CheckpointId) -> bool:
        return self.path_for(identity).is_file()

    def ordinals(self) -> List[int]:
        """Sorted integer identities currently stored under this tag."""
        if not self.root.is_dir():
            return []
        pattern = re.compile(rf"^{re.escape(self.tag)}_(\d+)\.json$")
        found = []
        for p in self.root.iterdir():
            m = pattern.match(p.name)
            if m:
                found.append(int(m.group(1)))
        return sorted(found)

    def save(self, identity: CheckpointId, state: StreamState) -> Path:
        """
        Serialize `state` under `identity`, replacing any previous checkpoint.

        The document is written to a temporary sibling first and moved into
        place, so readers never see a half-written file.

        Raises:
            CheckpointIOError: the directory or file could not be written.
        """
        state.validate()
        p = self.path_for(identity)
        doc = {"format": FORMAT_VERSION, **state.to_mapping()}
        tmp = p.with_name(p.name + ".tmp")

        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(doc), encoding="utf-8")
            os.replace(tmp, p)
        except OSError as exc:
            # leave no stray .tmp behind; the write error is what gets reported
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise CheckpointIOError(f"cannot write checkpoint {p}: {exc}") from exc

        logger.debug("Saved checkpoint %s", p)
        return p

    def load(self, identity: CheckpointId) -> StreamState:
        """
        Read the StreamState stored under `identity`.

        Raises:
            CheckpointNotFound: nothing is stored under `identity`.
            CorruptState: the file does not hold a valid engine state.
            CheckpointIOError: the file exists but could not be read.
        """
        p = self.path_for(identity)
        try:
            text = p.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CheckpointNotFound(f"no checkpoint at {p}") from exc
        except OSError as exc:
            raise CheckpointIOError(f"cannot read checkpoint {p}: {exc}") from exc

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CorruptState(f"checkpoint {p} is not valid JSON: {exc}") from exc

        if not isinstance(raw, dict) or raw.get("format") != FORMAT_VERSION:
            raise CorruptState(f"checkpoint {p} has an unknown format")

        try:
            state = StreamState.from_mapping(raw)
        except CorruptState as exc:
            raise CorruptState(f"checkpoint {p}: {exc}") from exc

        logger.debug("Loaded checkpoint %s", p)
        return state
