import threading

from lakeindex.config import DisplayMode
from lakeindex.session import IndexingSession, RewriteSettings


class TestIndexingSession:
    """Tests for the enable flag and settings snapshots."""

    def test_disabled_by_default(self):
        session = IndexingSession()
        assert not session.is_enabled()
        assert session.snapshot() == RewriteSettings()

    def test_enable_disable(self):
        session = IndexingSession()
        session.enable()
        assert session.is_enabled()
        session.disable()
        assert not session.is_enabled()

    def test_snapshot_is_not_affected_by_later_toggles(self):
        session = IndexingSession()
        session.enable()
        snapshot = session.snapshot()
        session.disable()
        session.set_display_mode(DisplayMode.HTML)

        assert snapshot.enabled is True
        assert snapshot.display_mode == DisplayMode.PLAIN_TEXT
        assert session.snapshot().display_mode == DisplayMode.HTML

    def test_concurrent_toggles_leave_consistent_state(self):
        session = IndexingSession()
        seen = []

        def toggle(i):
            for _ in range(200):
                if i % 2:
                    session.enable()
                else:
                    session.disable()
                seen.append(session.snapshot())

        threads = [threading.Thread(target=toggle, args=(i,)) for i in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 1200
        assert all(s.display_mode == DisplayMode.PLAIN_TEXT for s in seen)

    def test_str(self):
        assert str(IndexingSession(True)) == "IndexingSession(enabled, display=plain)"
