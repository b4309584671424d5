"""Tests for photorenamer.core.logger module."""

import os

from photorenamer.core.logger import (
    BufferedLogger,
    NullLogger,
    create_logger,
    summarize_results,
    write_batch_summary,
)
from photorenamer.core.models import ErrorKind, OperationResult


def _results():
    return [
        OperationResult.succeeded("/p/IMG_1.jpg", "/p/2023-06-15_14-30.jpg"),
        OperationResult.failed("/p/IMG_2.jpg", "/p/x.jpg", "Target file already exists.", ErrorKind.TARGET_EXISTS),
        OperationResult.failed("/p/IMG_3.jpg", "/p/y.jpg", None),
    ]


class TestBufferedLogger:
    """Tests for BufferedLogger class."""

    def test_lazy_open(self, temp_dir):
        logger = BufferedLogger(temp_dir)

        assert not logger.is_open
        assert not os.path.exists(logger.filepath)

    def test_writes_timestamped_lines(self, temp_dir):
        with BufferedLogger(os.path.join(temp_dir, "logs")) as logger:
            logger.log("first")
            logger.log("second")
            path = logger.filepath

        with open(path, encoding="utf-8") as f:
            lines = f.read().splitlines()
        assert len(lines) == 2
        assert lines[0].endswith(" - first")

    def test_closed_after_context(self, temp_dir):
        with BufferedLogger(temp_dir) as logger:
            logger.log("x")
        assert not logger.is_open

    def test_appends(self, temp_dir):
        for message in ("one", "two"):
            with BufferedLogger(temp_dir) as logger:
                logger.log(message)

        with open(os.path.join(temp_dir, "rename_log.txt"), encoding="utf-8") as f:
            assert len(f.read().splitlines()) == 2


class TestCreateLogger:
    """Tests for create_logger()."""

    def test_enabled(self, temp_dir):
        assert isinstance(create_logger(temp_dir), BufferedLogger)

    def test_disabled(self, temp_dir):
        assert isinstance(create_logger(temp_dir, enabled=False), NullLogger)

    def test_no_directory(self):
        logger = create_logger(None)

        assert isinstance(logger, NullLogger)
        with logger:
            logger.log("ignored")


class TestSummaries:
    """Tests for summarize_results() and write_batch_summary()."""

    def test_summarize(self):
        successes, failures, messages = summarize_results(_results())

        assert successes == 1
        assert failures == 2
        assert messages == [
            "IMG_2.jpg: Target file already exists.",
            "IMG_3.jpg: Unknown error",
        ]

    def test_write_summary(self, temp_dir):
        path = write_batch_summary(
            temp_dir, "/p", _results(), elapsed_time=75.0,
            start_time="2023-06-15 14:30:00", end_time="2023-06-15 14:31:15",
            pattern_id="date_time",
        )

        with open(path, encoding="utf-8") as f:
            text = f.read()
        assert "Pattern:   date_time" in text
        assert "Duration:  1m 15s" in text
        assert "Renamed:   1" in text
        assert "Failed:    2" in text
        assert "IMG_1.jpg -> 2023-06-15_14-30.jpg" in text
        assert "IMG_2.jpg: Target file already exists." in text
