"""Unit tests for the audit trail."""
import json
import threading

import pytest

from tests.conftest import log_activity


@pytest.fixture
def tmp_log_dir(monkeypatch, tmp_path):
    """Redirect audit log to a temp directory."""
    import greenmove.infrastructure.audit as audit_mod
    monkeypatch.setattr(audit_mod, "LOG_DIR", tmp_path)
    monkeypatch.setattr(audit_mod, "LOG_FILE", tmp_path / "audit.log")
    return tmp_path


def _entries(log_dir):
    return [json.loads(line) for line in (log_dir / "audit.log").read_text().splitlines()]


class TestLogEvent:
    def test_entry_is_valid_json(self, tmp_log_dir):
        from greenmove.infrastructure.audit import log_event
        log_event("activity_recorded", "uid-42", {"points": 50})
        entry = _entries(tmp_log_dir)[0]
        assert entry["action"] == "activity_recorded"
        assert entry["user_id"] == "uid-42"
        assert entry["payload"] == {"points": 50}

    def test_null_payload_defaults_to_empty_dict(self, tmp_log_dir):
        from greenmove.infrastructure.audit import log_event
        log_event("no_payload", "uid-0")
        assert _entries(tmp_log_dir)[0]["payload"] == {}

    def test_thread_safe_concurrent_writes(self, tmp_log_dir):
        from greenmove.infrastructure.audit import log_event
        threads = [
            threading.Thread(target=log_event, args=("concurrent", "uid", {"i": i}))
            for i in range(20)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(_entries(tmp_log_dir)) == 20


class TestLogSubmission:
    def test_activity_and_rewards_logged(self, tmp_log_dir, ledger):
        from greenmove.infrastructure.audit import log_submission
        log_submission(log_activity(ledger, quantity=5))
        entries = _entries(tmp_log_dir)
        assert [e["action"] for e in entries] == ["activity_recorded", "reward_unlocked"]
        assert entries[0]["payload"]["points_earned"] == 50
        assert entries[1]["payload"]["title"] == "First Steps"
