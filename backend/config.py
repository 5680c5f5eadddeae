"""Configuration management for the TravelBuddy dialogue engine."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # text | json

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173"
).split(",")

# Tour Catalog
CATALOG_API_URL = os.getenv("CATALOG_API_URL", "http://localhost/backend/api")
CATALOG_TIMEOUT_SECONDS = float(os.getenv("CATALOG_TIMEOUT_SECONDS", "10"))

# Learning Store Persistence
LEARNING_BACKEND = os.getenv("LEARNING_BACKEND", "file")  # file | supabase | memory
LEARNING_STORE_PATH = os.getenv("LEARNING_STORE_PATH", "data/chatbot_learning_data.json")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
SUPABASE_LEARNING_TABLE = os.getenv("SUPABASE_LEARNING_TABLE", "chatbot_learning_state")

# Resolution log (one JSON line per turn)
RESOLUTION_LOG_PATH = os.getenv("RESOLUTION_LOG_PATH", "logs/resolutions.jsonl")

# Dialogue Engine
CACHE_CAPACITY = 100
MAX_PREVIOUS_QUERIES = 5
MAX_RECOMMENDATIONS = 3
DURATION_TOLERANCE_DAYS = 2
MIN_KEYWORD_LENGTH = 4  # tokens must be longer than 3 characters
UNHELPFUL_PREFIX_LENGTH = 10
MIN_BUDGET_AMOUNT = 100  # unmarked range ends below this are not prices

# Sessions
SESSION_IDLE_TIMEOUT_SECONDS = int(os.getenv("SESSION_IDLE_TIMEOUT_SECONDS", "1800"))
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))

# Typing delay
TYPING_DELAY_ENABLED = os.getenv("TYPING_DELAY_ENABLED", "true").lower() == "true"
TYPING_DELAY_PER_CHAR = 0.015  # seconds
TYPING_DELAY_MAX_SECONDS = 1.5

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
