"""
Tests for the command-line interface and logging setup.
"""

import pytest
from loguru import logger

from ..cli import main
from ..session import SnapshotStore
from ..utils.logging import setup_logging
from .conftest import make_playing_state


class TestSnapshotCommand:
    """Tests for `treepick snapshot`."""

    def test_shows_summary(self, tmp_path, capsys):
        path = tmp_path / "room.json"
        state = make_playing_state(["alice", "bob"], turn="bob")
        state.scores["alice"] = 4
        SnapshotStore(path).save(state)

        main(["snapshot", str(path)])

        out = capsys.readouterr().out
        assert "Phase: playing" in out
        assert "Players: alice, bob (turn: bob)" in out
        assert "alice: 4" in out
        assert "Pickable cells: 1" in out

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["snapshot", str(tmp_path / "absent.json")])

        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().out

    def test_corrupt_file(self, tmp_path, capsys):
        path = tmp_path / "room.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main(["snapshot", str(path)])

        assert exc_info.value.code == 1
        assert "Error" in capsys.readouterr().out

    def test_no_command(self):
        with pytest.raises(SystemExit):
            main([])


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logging(log_level="LOUD")

    def test_file_sink(self, tmp_path):
        log_file = tmp_path / "logs" / "treepick.log"
        try:
            setup_logging(log_level="debug", log_file=log_file)
            logger.info("Playing with {}", ["alice"])
        finally:
            logger.remove()

        content = log_file.read_text(encoding="utf-8")
        assert "Playing with ['alice']" in content
