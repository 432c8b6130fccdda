from __future__ import annotations

import os
import uuid
from datetime import datetime
from pathlib import Path

from notes_client.settings import get_recovery_dir


# ───────────────────────── public API ─────────────────────────


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """
    Atomic-ish file write:
      - write to temp file in same directory
      - fsync
      - replace() into final path
    Helps prevent partial writes on crash/power loss.
    """
    path = Path(path)
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)

    tmp_path = parent / f".{path.name}.tmp-{uuid.uuid4().hex}"

    f = None
    try:
        f = open(tmp_path, "wb")
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
        f.close()
        f = None
        tmp_path.replace(path)
    finally:
        try:
            if f is not None:
                f.close()
        except Exception:
            pass
        try:
            if tmp_path.exists():
                tmp_path.unlink()
        except Exception:
            pass


def atomic_write_text(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    # newlines are written as given
    atomic_write_bytes(path, text.encode(encoding))


def write_recovery_copy(
    name: str,
    data: str | bytes,
    *,
    recovery_dir: Path | None = None,
) -> Path:
    """
    Best-effort emergency save: a failed write, or stored data that could
    not be read back. Writes a timestamped copy into <home>/recovery/.
    Bytes are copied as they are, text is written as UTF-8.
    """
    target_dir = Path(recovery_dir) if recovery_dir is not None else get_recovery_dir()
    stem = name or "notes"
    ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    rec_path = target_dir / f"{stem}.recovery.{ts}.json"
    if isinstance(data, str):
        data = data.encode("utf-8")
    atomic_write_bytes(rec_path, bytes(data))
    return rec_path
