"""Tests for conversation context persistence."""

import json

import pytest

from kysy.core.context_store import ContextStore
from kysy.core.errors import ContextLocked, CorruptState, PersistenceError

# ---------------------------------------------------------------------------
# load / provisioning
# ---------------------------------------------------------------------------


class TestLoad:
    """Loading and first-run provisioning."""

    def test_first_run_creates_empty_file_and_directory(self, store, config_dir):
        """The first load creates the directory and an empty file."""
        assert not config_dir.exists()

        assert store.load() is None

        assert config_dir.is_dir()
        assert store.path.read_text() == ""

    def test_provisioning_is_idempotent(self, store):
        """Provisioning twice leaves a single empty file."""
        assert store.provision() is True
        assert store.provision() is False
        assert store.path.read_text() == ""

    def test_empty_placeholder_yields_no_context(self, store):
        """The empty placeholder means no context."""
        store.provision()
        assert store.load() is None

    def test_whitespace_placeholder_yields_no_context(self, store):
        """A whitespace-only file also means no context."""
        store.provision()
        store.path.write_text("  \n")
        assert store.load() is None

    def test_reset_returns_none_and_keeps_file(self, store):
        """Reset skips the stored context without erasing it."""
        store.provision()
        store.save([4, 5, 6])

        assert store.load(reset_requested=True) is None
        assert json.loads(store.path.read_text()) == [4, 5, 6]

    def test_reset_on_first_run_still_provisions(self, store):
        """Reset on the first run still creates the file."""
        assert store.load(reset_requested=True) is None
        assert store.path.exists()

    @pytest.mark.parametrize(
        "content",
        ["not json", '{"context": [1]}', "[1, 2, \"3\"]", "[1.5]", "[true]", "42"],
    )
    def test_corrupt_content_raises(self, store, content):
        """Anything but a JSON array of integers is corrupt."""
        store.provision()
        store.path.write_text(content)

        with pytest.raises(CorruptState) as exc_info:
            store.load()
        assert exc_info.value.path == store.path

    def test_unreadable_path_raises_persistence_error(self, tmp_path):
        """A read failure is a persistence error."""
        # A directory where the file should be cannot be read as text
        path = tmp_path / "context.json"
        path.mkdir()

        with pytest.raises(PersistenceError):
            ContextStore(path).load()


# ---------------------------------------------------------------------------
# save
# ---------------------------------------------------------------------------


class TestSave:
    """Overwriting the stored context."""

    @pytest.mark.parametrize("context", [[], [0], [1, 2, 3], [-7, 2**40, 128257]])
    def test_round_trip(self, store, context):
        """A saved context loads back unchanged."""
        store.provision()
        store.save(context)
        assert store.load() == context

    def test_save_truncates_longer_previous_content(self, store):
        """No stale bytes survive a shorter save."""
        store.provision()
        store.save(list(range(100)))
        store.save([9])

        assert store.path.read_text() == "[9]"

    def test_save_writes_compact_json(self, store):
        """The file holds compact JSON."""
        store.provision()
        store.save([1, 2, 3])
        assert store.path.read_text() == "[1,2,3]"

    def test_missing_parent_directory_raises(self, tmp_path):
        """A missing parent directory is a persistence error."""
        store = ContextStore(tmp_path / "missing" / "context.json")
        with pytest.raises(PersistenceError):
            store.save([1])


# ---------------------------------------------------------------------------
# lock
# ---------------------------------------------------------------------------


class TestLock:
    """Single-writer lock around the context file."""

    def test_lock_file_sits_next_to_context(self, store):
        """The lock file is a sibling of context.json."""
        lock = store.lock()
        assert lock.path == store.path.with_name("context.json.lock")

    def test_second_holder_is_rejected(self, store):
        """A second holder fails fast."""
        with store.lock() as first:
            assert first.locked
            with pytest.raises(ContextLocked):
                store.lock().acquire()

    def test_lock_is_reusable_after_release(self, store):
        """The lock can be taken again once released."""
        with store.lock():
            pass
        with store.lock() as again:
            assert again.locked
        assert not again.locked

    def test_context_locked_is_a_persistence_error(self):
        """ContextLocked is reported as a persistence failure."""
        assert issubclass(ContextLocked, PersistenceError)
