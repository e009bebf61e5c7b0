import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./admissions.db")

# Auth (tokens are issued elsewhere; we only verify them)
JWT_SECRET = os.getenv("JWT_SECRET", "dev_secret_change_me")
JWT_ALG = os.getenv("JWT_ALG", "HS256")

# LLM generators
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.3"))
OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", "1500"))
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

# Recommendations
RECOMMENDATION_CACHE_TTL_SECONDS = float(os.getenv("RECOMMENDATION_CACHE_TTL_SECONDS", "300"))
DEFAULT_LIMIT = int(os.getenv("RECOMMENDATION_DEFAULT_LIMIT", "6"))
MAX_LIMIT = int(os.getenv("RECOMMENDATION_MAX_LIMIT", "50"))
SCHOOL_POOL_SIZE = int(os.getenv("SCHOOL_POOL_SIZE", "100"))
PROGRAM_POOL_SIZE = int(os.getenv("PROGRAM_POOL_SIZE", "50"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
