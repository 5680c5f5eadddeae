"""Unit tests for ResolutionLogger."""
import sys
sys.path.insert(0, 'backend')

import json
import pytest
from pathlib import Path
from services.resolution_logger import ResolutionLogger


@pytest.fixture
def temp_log_file(tmp_path):
    """Create a temporary log file path."""
    log_file = tmp_path / "test_resolutions.jsonl"
    return str(log_file)


@pytest.fixture
def resolution_logger(temp_log_file):
    """Create a ResolutionLogger instance with temporary log file."""
    logger = ResolutionLogger(log_file_path=temp_log_file)
    yield logger
    logger.close()


def test_log_resolution_creates_file(resolution_logger, temp_log_file):
    """Test that logging creates the log file."""
    resolution_logger.log_resolution(
        query="How do I book a tour?",
        resolution="faq",
        intent="booking",
        sentiment="neutral",
        stage="booking",
        cached=False
    )

    assert Path(temp_log_file).exists()


def test_log_resolution_json_format(resolution_logger, temp_log_file):
    """Test that log entries are in JSON Lines format."""
    resolution_logger.log_resolution(
        query="Show me adventure tours in Goa under ₹15000",
        resolution="recommendation",
        intent="browsing",
        sentiment="neutral",
        stage="deciding",
        cached=False,
        recommendations=2,
        latency_ms=4
    )

    with open(temp_log_file, 'r', encoding='utf-8') as f:
        log_entry = json.loads(f.readline())

    assert "timestamp" in log_entry
    assert log_entry["query"] == "Show me adventure tours in Goa under ₹15000"
    assert log_entry["resolution"] == "recommendation"
    assert log_entry["intent"] == "browsing"
    assert log_entry["sentiment"] == "neutral"
    assert log_entry["stage"] == "deciding"
    assert log_entry["cached"] is False
    assert log_entry["recommendations"] == 2
    assert log_entry["latency_ms"] == 4


def test_log_resolution_cache_hit_has_no_intent(resolution_logger, temp_log_file):
    """Cache hits skip analysis, so intent and sentiment are null."""
    resolution_logger.log_resolution(
        query="How do I book a tour?",
        resolution="cache_hit",
        intent=None,
        sentiment=None,
        stage="booking",
        cached=True
    )

    with open(temp_log_file, 'r', encoding='utf-8') as f:
        log_entry = json.loads(f.readline())

    assert log_entry["intent"] is None
    assert log_entry["cached"] is True
    assert log_entry["recommendations"] == 0


def test_log_resolution_multiple_entries(resolution_logger, temp_log_file):
    """Test that multiple log entries are written in order."""
    for i in range(5):
        resolution_logger.log_resolution(
            query=f"Query {i}",
            resolution="fallback",
            intent="inquiry",
            sentiment="neutral",
            stage="exploring",
            cached=False,
            latency_ms=i
        )

    with open(temp_log_file, 'r', encoding='utf-8') as f:
        log_entries = [json.loads(line) for line in f]

    assert len(log_entries) == 5
    for i, entry in enumerate(log_entries):
        assert entry["query"] == f"Query {i}"
        assert entry["latency_ms"] == i


def test_write_after_close_is_logged_not_raised(temp_log_file):
    """Writing to a closed logger does not break the chat turn."""
    logger = ResolutionLogger(log_file_path=temp_log_file)
    logger.close()

    logger.log_resolution(
        query="late",
        resolution="fallback",
        intent="inquiry",
        sentiment="neutral",
        stage="exploring",
        cached=False
    )
    logger.close()


def test_log_directory_creation(tmp_path):
    """Test that log directory is created if it doesn't exist."""
    log_file = tmp_path / "nested" / "dir" / "resolutions.jsonl"
    logger = ResolutionLogger(log_file_path=str(log_file))

    logger.log_resolution(
        query="Test",
        resolution="fallback",
        intent="inquiry",
        sentiment="neutral",
        stage="exploring",
        cached=False
    )

    assert log_file.exists()
    assert log_file.parent.exists()

    logger.close()
