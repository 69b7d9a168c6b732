"""Unit tests for the value/error stores and engine configuration.

Tests cover:
- Shallow-merge updates and snapshots
- Deletion with and without key removal
- Reset semantics
- EngineConfig construction and rejection of malformed mappings
"""

import pytest

from formstate.config import DEFAULT_CONFIG, EngineConfig
from formstate.errors import ConfigError, IssueCode
from formstate.store import Store


class TestStore:
    """Test the name-keyed store."""

    def test_merge_is_shallow(self):
        """Should replace whole keys and leave others alone."""
        store = Store({"a": {"nested": 1}, "b": 2})
        store.merge({"a": {"other": 3}})

        assert store.snapshot() == {"a": {"other": 3}, "b": 2}

    def test_snapshot_is_a_copy(self):
        """Should not expose the internal mapping."""
        store = Store({"a": 1})
        store.snapshot()["a"] = 99

        assert store.get("a") == 1

    def test_initial_mapping_is_copied(self):
        """Should not share the caller's mapping."""
        initial = {"a": 1}
        store = Store(initial)
        store.set("a", 2)

        assert initial == {"a": 1}

    def test_delete_removes_key_by_default(self):
        """Should drop the key and keep the others."""
        store = Store({"a": 1, "b": 2})
        store.delete("a")

        assert store.snapshot() == {"b": 2}
        assert "a" not in store

    def test_delete_keeping_key(self):
        """Should keep the key with None when configured to."""
        store = Store({"a": 1}, delete_removes_key=False)
        store.delete("a")

        assert store.snapshot() == {"a": None}
        assert store.has_value("a") is False

    def test_delete_missing_key(self):
        """Should not fail when deleting a key that does not exist."""
        store = Store()
        store.delete("missing")

        assert len(store) == 0

    def test_reset(self):
        """Should empty the store; resetting twice is the same as once."""
        store = Store({"a": 1})
        store.reset()
        once = store.snapshot()
        store.reset()

        assert once == store.snapshot() == {}

    def test_replace(self):
        """Should swap the whole mapping."""
        store = Store({"a": 1})
        store.replace({"b": 2})

        assert store.snapshot() == {"b": 2}
        assert list(store) == ["b"]


class TestEngineConfig:
    """Test engine configuration."""

    def test_defaults(self):
        """Should default to plain validators and key-removing deletes."""
        assert DEFAULT_CONFIG.pass_context is False
        assert DEFAULT_CONFIG.missing_value is None
        assert DEFAULT_CONFIG.delete_removes_key is True
        assert DEFAULT_CONFIG.emit_events is True

    def test_from_dict(self):
        """Should build a config from a mapping."""
        cfg = EngineConfig.from_dict({"pass_context": True, "missing_value": ""})

        assert cfg.pass_context is True
        assert cfg.missing_value == ""
        assert cfg.to_dict()["delete_removes_key"] is True

    def test_from_none(self):
        """Should treat None as the default config."""
        assert EngineConfig.from_dict(None) == DEFAULT_CONFIG

    def test_unknown_key(self):
        """Should reject unknown keys."""
        with pytest.raises(ConfigError) as exc_info:
            EngineConfig.from_dict({"passContext": True})

        assert exc_info.value.issues[0].code == IssueCode.UNKNOWN_KEY

    def test_wrong_type(self):
        """Should reject a non-boolean switch."""
        with pytest.raises(ConfigError) as exc_info:
            EngineConfig.from_dict({"emit_events": "yes"})

        issue = exc_info.value.issues[0]
        assert issue.code == IssueCode.INVALID_TYPE
        assert issue.path == "emit_events"
        assert exc_info.value.to_dict()["issues"][0]["code"] == "invalid_type"
