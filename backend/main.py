"""Main entry point for the TravelBuddy dialogue engine API."""
import asyncio
import logging
import time
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from config import (
    CATALOG_API_URL,
    CATALOG_TIMEOUT_SECONDS,
    CORS_ORIGINS,
    LEARNING_BACKEND,
    LEARNING_STORE_PATH,
    LOG_FORMAT,
    LOG_LEVEL,
    PORT,
    RESOLUTION_LOG_PATH,
    SUPABASE_KEY,
    SUPABASE_LEARNING_TABLE,
    SUPABASE_URL,
    TYPING_DELAY_ENABLED,
)
from logger import setup_logging
from models.api import ChatRequest, ChatResponse, FAQOut, FeedbackRequest, TourOut
from models.tour import TourRecord
from services.catalog_client import CatalogClient, TourCatalog
from services.conversation_manager import ConversationManager, FeedbackAlreadyRecorded, SessionClosedError
from services.learning_store import (
    InMemoryLearningRepository,
    JsonFileLearningRepository,
    LearningRepository,
    LearningStore,
    SupabaseLearningRepository,
)
from services.resolution_logger import ResolutionLogger
from services.response_pipeline import ResponsePipeline

if LOG_FORMAT == "json":
    setup_logging(LOG_LEVEL)

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="TravelBuddy Assistant",
    description="Conversational tour recommendation assistant for the booking app",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
tour_catalog: TourCatalog = None
pipeline: ResponsePipeline = None
conversation_manager: ConversationManager = None
resolution_logger: ResolutionLogger = None
_catalog_refresh_task: Optional[asyncio.Task] = None


def build_learning_repository(backend: str = LEARNING_BACKEND) -> LearningRepository:
    """Select the learning store persistence backend."""
    if backend == "supabase":
        return SupabaseLearningRepository.from_credentials(SUPABASE_URL, SUPABASE_KEY, SUPABASE_LEARNING_TABLE)
    if backend == "memory":
        return InMemoryLearningRepository()
    return JsonFileLearningRepository(LEARNING_STORE_PATH)


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global tour_catalog, pipeline, conversation_manager, resolution_logger, _catalog_refresh_task

    logger.info("Initializing TravelBuddy services...")

    try:
        learning_store = LearningStore(build_learning_repository())
        learning_store.load()
        logger.info(f"Initialized LearningStore ({LEARNING_BACKEND} backend)")

        tour_catalog = TourCatalog(CatalogClient(CATALOG_API_URL, CATALOG_TIMEOUT_SECONDS))
        # Catalog loads in the background; the pipeline works with an empty catalog meanwhile
        _catalog_refresh_task = asyncio.create_task(tour_catalog.refresh())

        resolution_logger = ResolutionLogger(RESOLUTION_LOG_PATH)

        # Each ChatSession owns its response cache
        pipeline = ResponsePipeline(
            learning_store=learning_store,
            catalog=tour_catalog,
            resolution_logger=resolution_logger,
        )

        conversation_manager = ConversationManager(pipeline, typing_delay_enabled=TYPING_DELAY_ENABLED)

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Cancel pending work and close log files."""
    if _catalog_refresh_task is not None and not _catalog_refresh_task.done():
        _catalog_refresh_task.cancel()
    if conversation_manager is not None:
        conversation_manager.close_all()
    if resolution_logger is not None:
        resolution_logger.close()
    logger.info("TravelBuddy services shut down")


def _tour_out(tour: TourRecord) -> TourOut:
    return TourOut(
        id=tour.id,
        title=tour.title,
        destination=tour.destination,
        price=tour.price,
        duration_days=tour.duration_days,
        difficulty_level=tour.difficulty_level,
        category=tour.category,
    )


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "TravelBuddy Assistant API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "travelbuddy-assistant",
        "version": "1.0.0",
        "catalog_size": len(tour_catalog.tours) if tour_catalog else 0,
        "active_sessions": len(conversation_manager) if conversation_manager else 0,
    }


@app.post("/chat", response_model=ChatResponse)
async def chat_endpoint(request: ChatRequest) -> ChatResponse:
    """
    Process one user message.

    Args:
        request: ChatRequest with message and optional session_id

    Returns:
        ChatResponse with reply, suggestions, tour recommendations and session state

    Raises:
        HTTPException: For validation errors or unexpected failures
    """
    start_time = time.time()

    try:
        if not request.message.strip():
            raise HTTPException(status_code=400, detail="Message cannot be blank")

        session = conversation_manager.get_or_create_session(request.session_id)
        logger.info(f"Processing message for {session.session_id}: {request.message[:100]}")

        reply = await session.send(request.message)
        result = session.last_result

        total_latency_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Message processed in {total_latency_ms}ms via {result.resolution}")

        return ChatResponse(
            reply=reply.text,
            suggestions=reply.suggestions,
            tour_recommendations=[_tour_out(t) for t in reply.tour_recommendations],
            session_id=session.session_id,
            message_id=reply.id,
            # Cache hits skip analysis: no intent, and the stage is unchanged
            intent=result.intent.value if result.intent else None,
            stage=result.context.stage.value,
            cached=result.cached,
        )

    except HTTPException:
        raise
    except SessionClosedError:
        raise HTTPException(status_code=409, detail="Session was closed while processing the message")
    except Exception as e:
        logger.error(f"Unexpected error processing message: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")


@app.post("/feedback")
async def feedback_endpoint(request: FeedbackRequest):
    """Record whether an assistant reply was helpful."""
    try:
        session = conversation_manager.get_session(request.session_id)
        session.record_feedback(request.message_id, request.helpful)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=f"Not found: {e.args[0]}")
    except FeedbackAlreadyRecorded:
        raise HTTPException(status_code=409, detail="Feedback already recorded for this message")

    return {"status": "recorded"}


@app.delete("/sessions/{session_id}")
async def end_session_endpoint(session_id: str):
    """End a session and cancel any pending reply."""
    if not conversation_manager.end_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return {"status": "ended"}


@app.get("/faqs/popular", response_model=List[FAQOut])
async def popular_faqs_endpoint(limit: int = Query(6, ge=1, le=25)) -> List[FAQOut]:
    """Most frequently matched FAQs."""
    store = pipeline.learning_store
    return [
        FAQOut(
            id=faq.id,
            question=faq.question,
            answer=faq.answer,
            category=faq.category,
            popularity=store.faq_popularity(faq.id),
        )
        for faq in pipeline.popular_faqs(limit)
    ]


@app.post("/faqs/{faq_id}", response_model=FAQOut)
async def select_faq_endpoint(faq_id: str) -> FAQOut:
    """Answer an FAQ picked directly from the suggestion list."""
    try:
        faq = pipeline.answer_faq(faq_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"FAQ {faq_id} not found")

    return FAQOut(
        id=faq.id,
        question=faq.question,
        answer=faq.answer,
        category=faq.category,
        popularity=pipeline.learning_store.faq_popularity(faq.id),
    )


@app.get("/suggestions")
async def suggestions_endpoint(q: str = Query("", max_length=200)):
    """Autocomplete a partially typed message."""
    return {"suggestions": pipeline.typing_suggestions(q)}


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting TravelBuddy Assistant API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
