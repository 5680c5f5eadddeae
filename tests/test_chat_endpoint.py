"""Integration tests for the chat API endpoints."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock, patch
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


@pytest.fixture
def client():
    """Create a test client wired to in-memory services."""
    # Import after path is set
    from main import app
    from models.tour import TourRecord
    from services.catalog_client import TourCatalog
    from services.conversation_manager import ConversationManager
    from services.learning_store import InMemoryLearningRepository, LearningStore
    from services.response_pipeline import ResponsePipeline

    # Mock the startup event to avoid contacting the real catalog
    with patch('main.startup_event'):
        client = TestClient(app)

        learning_store = LearningStore(InMemoryLearningRepository())
        learning_store.load()
        tour_catalog = TourCatalog(tours=[
            TourRecord("t1", "Goa Beach Adventure", "Goa", 12000.0, 5, "moderate", "adventure"),
            TourRecord("t2", "Goa Luxury Retreat", "Goa", 30000.0, 4, "easy", "luxury"),
            TourRecord("t3", "Goa Scuba Adventure", "Goa", 9000.0, 3, "challenging", "adventure"),
        ])
        pipeline = ResponsePipeline(learning_store=learning_store, catalog=tour_catalog)

        # Manually set the global services
        import main
        main.tour_catalog = tour_catalog
        main.pipeline = pipeline
        main.conversation_manager = ConversationManager(pipeline, typing_delay_enabled=False)
        main.resolution_logger = Mock()

        yield client


def start_chat(client, message, session_id=None):
    payload = {"message": message}
    if session_id:
        payload["session_id"] = session_id
    response = client.post("/chat", json=payload)
    assert response.status_code == 200
    return response.json()


def test_health(client):
    """Test the health endpoint reports catalog size."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["catalog_size"] == 3


def test_chat_recommends_tours(client):
    """Test a browsing message returns ranked tours."""
    data = start_chat(client, "Show me adventure tours in Goa under ₹15000 for 5 days")

    assert [t["id"] for t in data["tour_recommendations"]] == ["t1", "t3"]
    assert data["intent"] == "browsing"
    assert data["stage"] == "deciding"
    assert data["cached"] is False
    assert data["session_id"].startswith("sess_")
    assert data["message_id"].startswith("msg_")
    assert len(data["suggestions"]) == 4


def test_chat_reuses_session(client):
    """Test that a follow-up in the same session keeps context."""
    first = start_chat(client, "Show me tours in Goa")
    second = start_chat(client, "Show me something under ₹10000", first["session_id"])

    assert second["session_id"] == first["session_id"]
    assert [t["id"] for t in second["tour_recommendations"]] == ["t3"]


def test_chat_repeat_is_cached(client):
    """Test that a repeated message is served from cache."""
    first = start_chat(client, "How do refunds work")
    second = start_chat(client, "How do refunds work", first["session_id"])

    assert second["cached"] is True
    assert second["reply"] == first["reply"]
    assert second["suggestions"] == []


def test_chat_cached_reply_reports_no_intent(client):
    """Test that a cache hit reports no intent and keeps the stage."""
    first = start_chat(client, "Show me tours in Goa")
    second = start_chat(client, "Show me tours in Goa", first["session_id"])

    assert second["cached"] is True
    assert second["intent"] is None
    assert second["stage"] == first["stage"] == "deciding"


def test_chat_cache_is_per_session(client):
    """Test that another session does not get the first session's cached reply."""
    first = start_chat(client, "How do refunds work")
    other = start_chat(client, "How do refunds work")

    assert other["session_id"] != first["session_id"]
    assert other["cached"] is False


def test_chat_empty_message(client):
    """Test that an empty message fails validation."""
    response = client.post("/chat", json={"message": ""})

    assert response.status_code == 422


def test_chat_blank_message(client):
    """Test that a whitespace-only message is rejected."""
    response = client.post("/chat", json={"message": "   "})

    assert response.status_code == 400


def test_chat_missing_message(client):
    """Test that a request without a message fails validation."""
    response = client.post("/chat", json={})

    assert response.status_code == 422


def test_chat_internal_error(client):
    """Test that unexpected pipeline errors map to 500."""
    import main
    with patch.object(main.pipeline, 'process_message', side_effect=RuntimeError("boom")):
        response = client.post("/chat", json={"message": "hello"})

    assert response.status_code == 500


def test_feedback_flow(client):
    """Test negative feedback changes the next similar answer."""
    first = start_chat(client, "How do refunds work")

    response = client.post("/feedback", json={
        "session_id": first["session_id"],
        "message_id": first["message_id"],
        "helpful": False,
    })
    assert response.status_code == 200

    follow_up = start_chat(client, "How do refunds process", first["session_id"])
    assert "+91-9876543210" in follow_up["reply"]


def test_feedback_twice_conflicts(client):
    """Test that a message can only be rated once."""
    first = start_chat(client, "How do refunds work")
    payload = {"session_id": first["session_id"], "message_id": first["message_id"], "helpful": True}

    assert client.post("/feedback", json=payload).status_code == 200
    assert client.post("/feedback", json=payload).status_code == 409


def test_feedback_unknown_session(client):
    """Test that feedback for an unknown session is 404."""
    response = client.post("/feedback", json={"session_id": "sess_x", "message_id": "msg_x", "helpful": True})

    assert response.status_code == 404


def test_feedback_unknown_message(client):
    """Test that feedback for an unknown message is 404."""
    first = start_chat(client, "hi")
    response = client.post("/feedback", json={
        "session_id": first["session_id"],
        "message_id": "msg_missing",
        "helpful": True,
    })

    assert response.status_code == 404


def test_end_session(client):
    """Test ending a session."""
    first = start_chat(client, "hi")

    assert client.delete(f"/sessions/{first['session_id']}").status_code == 200
    assert client.delete(f"/sessions/{first['session_id']}").status_code == 404


def test_popular_faqs(client):
    """Test that selecting an FAQ raises its popularity."""
    selected = client.post("/faqs/8")
    assert selected.status_code == 200
    assert selected.json()["popularity"] == 1

    response = client.get("/faqs/popular", params={"limit": 3})
    assert response.status_code == 200
    faqs = response.json()
    assert len(faqs) == 3
    assert faqs[0]["id"] == "8"


def test_select_unknown_faq(client):
    """Test selecting a missing FAQ."""
    assert client.post("/faqs/999").status_code == 404


def test_suggestions(client):
    """Test autocomplete suggestions."""
    response = client.get("/suggestions", params={"q": "refund"})

    assert response.status_code == 200
    assert "What is your refund policy?" in response.json()["suggestions"]
