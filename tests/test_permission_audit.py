"""Unit tests for permission audit logging."""

import json

import pytest

from scripts import audit


@pytest.fixture
def temp_audit_dir(monkeypatch, tmp_path):
    """Provide isolated audit directory for each test."""
    audit_dir = tmp_path / "audit"
    audit_file = audit_dir / "permission-events.jsonl"
    
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_file)
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-signing-key-for-audit-trail")
    
    yield audit_dir, audit_file


def test_log_event_creates_file(temp_audit_dir):
    _, audit_file = temp_audit_dir
    
    audit.log_permission_event("permission_create", "p-1", operator="admin", details={"key": "read:users"})
    
    assert audit_file.exists()
    assert audit_file.stat().st_mode & 0o777 == 0o600


def test_logged_event_fields(temp_audit_dir):
    _, audit_file = temp_audit_dir
    
    audit.log_permission_event("permission_drift", "p-9", success=True)
    
    event = json.loads(audit_file.read_text().strip())
    assert event["event_type"] == "permission_drift"
    assert event["permission_id"] == "p-9"
    assert event["operator"] == "system"
    assert event["details"] == {}
    assert len(event["signature"]) == 64


def test_verify_detects_tampering(temp_audit_dir):
    _, audit_file = temp_audit_dir
    
    audit.log_permission_event("permission_create", "p-1")
    audit.log_permission_event("permission_delete", "p-1")
    assert audit.verify_audit_log() == (2, 2)
    
    lines = audit_file.read_text().splitlines()
    tampered = json.loads(lines[1])
    tampered["success"] = False
    lines[1] = json.dumps(tampered)
    audit_file.write_text("\n".join(lines) + "\n")
    
    assert audit.verify_audit_log() == (2, 1)


def test_unsigned_without_key(temp_audit_dir, monkeypatch):
    _, audit_file = temp_audit_dir
    monkeypatch.delenv("AUDIT_LOG_SIGNING_KEY")
    monkeypatch.setattr(audit, "_default_secret_paths", [])
    
    audit.log_permission_event("permission_read", "p-1")
    
    event = json.loads(audit_file.read_text().strip())
    assert "signature" not in event


def test_verify_without_log(temp_audit_dir):
    assert audit.verify_audit_log() == (0, 0)


def test_safe_log_swallows_write_errors(monkeypatch, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", blocker)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", blocker / "events.jsonl")
    
    assert audit.safe_log_permission_event("permission_create", "p-1") is False
