"""Append-only audit trail for ledger events.

Writes newline-delimited JSON entries to `logs/audit.log`.
Thread-safe via a module-level lock.
"""
import json
import threading
from datetime import datetime, timezone
from pathlib import Path

_LOCK = threading.Lock()

ROOT = Path(__file__).resolve().parent.parent.parent
LOG_DIR = ROOT / "logs"
LOG_FILE = LOG_DIR / "audit.log"


def log_event(action: str, user_id: str | None, payload: dict | None = None) -> None:
    entry = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "user_id": user_id,
        "payload": payload or {},
    }
    line = json.dumps(entry, ensure_ascii=False) + "\n"
    with _LOCK:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(line)


def log_submission(submission) -> None:
    """Record an activity and every reward it unlocked."""
    activity = submission.activity
    log_event("activity_recorded", activity.user_id, {
        "activity_id": activity.id,
        "category": activity.category,
        "activity_type": activity.activity_type,
        "carbon_saved": activity.carbon_saved,
        "points_earned": activity.points_earned,
    })
    for reward in submission.rewards:
        log_event("reward_unlocked", reward.user_id, {
            "reward_id": reward.id,
            "milestone_key": reward.milestone_key,
            "title": reward.title,
            "points_awarded": reward.points_awarded,
        })
