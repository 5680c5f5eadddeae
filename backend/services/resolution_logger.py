"""JSON Lines log of how each chat turn was resolved."""
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from config import RESOLUTION_LOG_PATH

logger = logging.getLogger(__name__)


class ResolutionLogger:
    """Appends one JSON object per processed turn to a log file."""

    def __init__(self, log_file_path: str = RESOLUTION_LOG_PATH):
        """
        Initialize the resolution logger.

        Args:
            log_file_path: Path of the JSON Lines file (parent dirs are created)
        """
        self.log_file_path = Path(log_file_path)
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._file = open(self.log_file_path, "a", encoding="utf-8")
        logger.info(f"Initialized ResolutionLogger at {self.log_file_path}")

    def log_resolution(
        self,
        query: str,
        resolution: str,
        intent: Optional[str],
        sentiment: Optional[str],
        stage: str,
        cached: bool,
        recommendations: int = 0,
        latency_ms: int = 0
    ) -> None:
        """
        Write a resolution record.

        Args:
            query: Raw user message
            resolution: Name of the pipeline step that produced the reply
            intent: Detected intent (None on cache hits)
            sentiment: Detected sentiment (None on cache hits)
            stage: Conversation stage after the turn
            cached: Whether the reply came from the response cache
            recommendations: Number of tours recommended
            latency_ms: Time spent resolving the turn
        """
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "query": query,
            "resolution": resolution,
            "intent": intent,
            "sentiment": sentiment,
            "stage": stage,
            "cached": cached,
            "recommendations": recommendations,
            "latency_ms": latency_ms,
        }

        try:
            with self._lock:
                self._file.write(json.dumps(entry, ensure_ascii=False) + "\n")
                self._file.flush()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write resolution log entry: {e}")

    def close(self) -> None:
        """Close the underlying log file."""
        with self._lock:
            if not self._file.closed:
                self._file.close()
