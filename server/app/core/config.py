import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

SERVER_DIR = Path(__file__).resolve().parent.parent.parent


class Settings:
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_API_BASE: str = os.getenv(
        "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
    )
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "10000"))
    RIGVEDA_DATA_PATH: str = os.getenv(
        "RIGVEDA_DATA_PATH", str(SERVER_DIR / "data" / "rigveda.json")
    )
    CORS_ORIGINS: list[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "60"))
    RETRY_MAX_ATTEMPTS: int = int(os.getenv("RETRY_MAX_ATTEMPTS", "3"))
    RETRY_BASE_DELAY_SECONDS: float = float(
        os.getenv("RETRY_BASE_DELAY_SECONDS", "1.0")
    )
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Alternate completion provider, not used by any route yet
    TOGETHER_API_KEY: str = os.getenv("TOGETHER_API_KEY", "")
    TOGETHER_BASE_URL: str = os.getenv(
        "TOGETHER_BASE_URL", "https://api.together.xyz/v1"
    )

    @property
    def gemini_url(self) -> str:
        return f"{self.GEMINI_API_BASE}/models/{self.GEMINI_MODEL}:generateContent"


settings = Settings()
