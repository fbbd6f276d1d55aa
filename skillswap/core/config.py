from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

class Settings(BaseSettings):
    app_name: str = "SkillSwap API"
    debug: bool = False
    environment: str = "production"
    api_v1_prefix: str = "/api/v1"
    frontend_url: str = "http://localhost:5173"
    log_level: str = "INFO"

    # Supabase project (tables, auth and realtime)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    # Supabase Auth signs access tokens with the project JWT secret
    jwt_secret: str = "your-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"

    swap_message_min_length: int = 20
    swap_message_max_length: int = 1000
    rating_feedback_max_length: int = 500
    default_skill_category: str = "Other"

    class Config:
        env_file = ".env"

@lru_cache()
def get_settings() -> Settings:
    return Settings()
