from __future__ import annotations

import logging
import threading
import time
import uuid


logger = logging.getLogger(__name__)
_lock = threading.RLock()
# job label -> (token, monotonic expiry)
_held: dict[str, tuple[str, float]] = {}


def acquire_job_lock(job_label: str, *, ttl_seconds: int = 900) -> str | None:
    token = uuid.uuid4().hex
    now = time.monotonic()
    with _lock:
        existing = _held.get(job_label)
        if existing is not None and existing[1] > now:
            return None
        if existing is not None:
            logger.warning('job_lock_expired_reclaimed job=%s', job_label)
        _held[job_label] = (token, now + max(1, int(ttl_seconds)))
        return token


def release_job_lock(job_label: str, token: str) -> None:
    if not token:
        return
    with _lock:
        current = _held.get(job_label)
        if current is None:
            return
        if current[0] == token:
            _held.pop(job_label, None)


def reset_job_locks() -> None:
    with _lock:
        _held.clear()
