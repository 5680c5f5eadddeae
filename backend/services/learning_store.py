"""Durable learning store for usage signals persisted across sessions."""
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from config import UNHELPFUL_PREFIX_LENGTH
from models.learning import LearningState, UnhelpfulResponse
from services.utterance_analyzer import tokenize

logger = logging.getLogger(__name__)


class LearningRepository:
    """Persistence boundary for the learning state blob."""

    def load_learning_state(self) -> Optional[Dict[str, Any]]:
        """Return the last saved blob, or None if nothing was saved yet."""
        raise NotImplementedError

    def save_learning_state(self, blob: Dict[str, Any]) -> None:
        """Overwrite the persisted blob. Raises on failure."""
        raise NotImplementedError


class InMemoryLearningRepository(LearningRepository):
    """Keeps the blob in process memory; used for tests and ephemeral runs."""

    def __init__(self, blob: Optional[Dict[str, Any]] = None):
        self.blob = blob
        self.save_count = 0

    def load_learning_state(self) -> Optional[Dict[str, Any]]:
        return json.loads(json.dumps(self.blob)) if self.blob is not None else None

    def save_learning_state(self, blob: Dict[str, Any]) -> None:
        self.blob = json.loads(json.dumps(blob))
        self.save_count += 1


class JsonFileLearningRepository(LearningRepository):
    """Stores the blob as a JSON document on local disk."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load_learning_state(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save_learning_state(self, blob: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to a sibling temp file, then swap it in
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(blob, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class SupabaseLearningRepository(LearningRepository):
    """Stores the blob in a single row of a Supabase PostgreSQL table."""

    def __init__(self, client, table_name: str, state_key: str = "default"):
        """
        Initialize the repository.

        Args:
            client: supabase Client
            table_name: Table with columns (id text primary key, state jsonb, updated_at)
            state_key: Row id holding this deployment's learning state
        """
        self.client = client
        self.table_name = table_name
        self.state_key = state_key
        logger.info(f"SupabaseLearningRepository using table: {table_name}")

    @classmethod
    def from_credentials(cls, url: str, key: str, table_name: str) -> "SupabaseLearningRepository":
        """Create a repository with a new Supabase client."""
        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

        from supabase import create_client
        return cls(create_client(url, key), table_name)

    def load_learning_state(self) -> Optional[Dict[str, Any]]:
        result = self.client.table(self.table_name).select("*").eq("id", self.state_key).execute()
        if not result.data:
            return None
        state = result.data[0]["state"]
        if isinstance(state, str):
            state = json.loads(state)
        return state

    def save_learning_state(self, blob: Dict[str, Any]) -> None:
        self.client.table(self.table_name).upsert({
            "id": self.state_key,
            "state": blob,
            "updated_at": datetime.now(timezone.utc).isoformat()
        }).execute()


def state_to_blob(state: LearningState) -> Dict[str, Any]:
    """Serialize a LearningState to a JSON-compatible dict."""
    return {
        "query_frequency": dict(state.query_frequency),
        "unhelpful_log": [
            {
                "query": entry.query,
                "response": entry.response,
                "timestamp": entry.timestamp.isoformat(),
            }
            for entry in state.unhelpful_log
        ],
        "faq_popularity": dict(state.faq_popularity),
        "keyword_frequency": dict(state.keyword_frequency),
    }


def blob_to_state(blob: Dict[str, Any]) -> LearningState:
    """
    Parse a persisted blob.

    Raises:
        ValueError: If the blob does not have the expected structure
    """
    if not isinstance(blob, dict):
        raise ValueError(f"Learning state must be an object, got {type(blob).__name__}")

    try:
        return LearningState(
            query_frequency={str(k): int(v) for k, v in blob.get("query_frequency", {}).items()},
            unhelpful_log=[
                UnhelpfulResponse(
                    query=str(entry["query"]),
                    response=str(entry["response"]),
                    timestamp=datetime.fromisoformat(entry["timestamp"]),
                )
                for entry in blob.get("unhelpful_log", [])
            ],
            faq_popularity={str(k): int(v) for k, v in blob.get("faq_popularity", {}).items()},
            keyword_frequency={str(k): int(v) for k, v in blob.get("keyword_frequency", {}).items()},
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Malformed learning state: {e}") from e


class LearningStore:
    """
    Query, FAQ and keyword counters plus the negative-feedback log.

    Every mutation is written through to the repository immediately. Nothing
    is ever pruned: the log and the frequency maps grow without bound.
    """

    def __init__(self, repository: LearningRepository):
        self.repository = repository
        self.state = LearningState()

    def load(self) -> LearningState:
        """
        Load the persisted state, falling back to an empty state.

        Missing, unreadable or malformed blobs never raise.
        """
        try:
            blob = self.repository.load_learning_state()
        except Exception as e:
            logger.error(f"Error loading learning data: {e}")
            self.state = LearningState()
            return self.state

        if blob is None:
            logger.info("No saved learning data, starting empty")
            self.state = LearningState()
            return self.state

        try:
            self.state = blob_to_state(blob)
        except ValueError as e:
            logger.error(f"Error parsing learning data, starting empty: {e}")
            self.state = LearningState()
            return self.state

        logger.info(
            f"Loaded learning data: {len(self.state.query_frequency)} queries, "
            f"{len(self.state.unhelpful_log)} unhelpful responses"
        )
        return self.state

    def save(self) -> bool:
        """Write the full state through to the repository; failures are logged only."""
        try:
            self.repository.save_learning_state(state_to_blob(self.state))
            return True
        except Exception as e:
            logger.error(f"Error saving learning data: {e}")
            return False

    def record_query(self, query: str) -> None:
        """Count the normalized query and each of its keyword tokens."""
        normalized = query.lower().strip()
        self.state.query_frequency[normalized] = self.state.query_frequency.get(normalized, 0) + 1

        for keyword in tokenize(query):
            self.state.keyword_frequency[keyword] = self.state.keyword_frequency.get(keyword, 0) + 1

        self.save()

    def record_unhelpful(self, query: str, response: str) -> None:
        """Append a reply the user marked as not helpful."""
        self.state.unhelpful_log.append(
            UnhelpfulResponse(query=query, response=response, timestamp=datetime.now(timezone.utc))
        )
        logger.info(f"Recorded unhelpful response for query: {query[:50]}")
        self.save()

    def record_faq_hit(self, faq_id: str) -> None:
        self.state.faq_popularity[faq_id] = self.state.faq_popularity.get(faq_id, 0) + 1
        self.save()

    def query_count(self, query: str) -> int:
        return self.state.query_frequency.get(query.lower().strip(), 0)

    def faq_popularity(self, faq_id: str) -> int:
        return self.state.faq_popularity.get(faq_id, 0)

    def find_unhelpful_echo(
        self,
        text: str,
        prefix_length: int = UNHELPFUL_PREFIX_LENGTH
    ) -> Optional[UnhelpfulResponse]:
        """
        Find a logged unhelpful exchange that looks like the current text.

        An entry matches when the first `prefix_length` characters of either
        the entry's query or the current text occur inside the other.
        """
        text_lower = text.lower()
        if not text_lower.strip():
            return None

        for entry in self.state.unhelpful_log:
            logged = entry.query.lower()
            if not logged.strip():
                continue
            if text_lower[:prefix_length] in logged or logged[:prefix_length] in text_lower:
                return entry
        return None

    def learned_keywords(self, tokens: Sequence[str]) -> List[str]:
        """Return learned keywords present in tokens, most frequent first."""
        wanted = set(tokens)
        matches = [k for k in self.state.keyword_frequency if k in wanted]
        return sorted(matches, key=lambda k: self.state.keyword_frequency[k], reverse=True)

    def frequent_queries(self, fragment: str) -> List[str]:
        """Return learned queries containing fragment, most frequent first."""
        fragment = fragment.lower()
        matches = [q for q in self.state.query_frequency if fragment in q]
        return sorted(matches, key=lambda q: self.state.query_frequency[q], reverse=True)
