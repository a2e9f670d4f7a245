from pydantic_settings import BaseSettings
from typing import List, Optional
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "GlowNexa"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    PORT: int = int(os.getenv("PORT", 4000))

    # CORS - the browser app origin (comma separated for several)
    CLIENT_ORIGIN: str = os.getenv("CLIENT_ORIGIN", "http://localhost:3000")

    # SMTP (contact form relay)
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", 587)) if os.getenv("SMTP_PORT") else 587
    SMTP_SECURE: bool = os.getenv("SMTP_SECURE", "false").lower() == "true"
    SMTP_USER: Optional[str] = os.getenv("SMTP_USER")
    SMTP_PASS: Optional[str] = os.getenv("SMTP_PASS")
    CONTACT_TO_EMAIL: Optional[str] = os.getenv("CONTACT_TO_EMAIL")

    # Rate Limiting
    CONTACT_RATE_LIMIT_REQUESTS: int = 6
    CONTACT_RATE_LIMIT_WINDOW: int = 60
    AUTH_RATE_LIMIT_REQUESTS: int = 5
    AUTH_RATE_LIMIT_WINDOW: int = 60

    # Database
    MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017/glownexa")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "glownexa")

    # Redis (rate limiting)
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")

    # Cloudinary
    CLOUDINARY_CLOUD_NAME: Optional[str] = os.getenv("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_UPLOAD_PRESET: Optional[str] = os.getenv("CLOUDINARY_UPLOAD_PRESET")
    CLOUDINARY_API_KEY: Optional[str] = os.getenv("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET: Optional[str] = os.getenv("CLOUDINARY_API_SECRET")
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB

    # Firebase
    FIREBASE_API_KEY: Optional[str] = os.getenv("FIREBASE_API_KEY")
    FIREBASE_PROJECT_ID: Optional[str] = os.getenv("FIREBASE_PROJECT_ID")
    FIREBASE_SERVICE_ACCOUNT_PATH: Optional[str] = os.getenv("FIREBASE_SERVICE_ACCOUNT_PATH")
    EMAIL_VERIFICATION_CONTINUE_URL: str = os.getenv(
        "EMAIL_VERIFICATION_CONTINUE_URL", "https://glownexa.vercel.app/login"
    )

    # AI label stored with every analysis
    AI_MODEL_NAME: str = os.getenv("AI_MODEL_NAME", "gemini-1.5-flash")

    # Monitoring
    ENABLE_METRICS: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CLIENT_ORIGIN.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Allow extra fields from .env file

settings = Settings()
