import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root
env_path = BASE_DIR / ".env"
load_dotenv(dotenv_path=env_path)

class Settings:
    # Remote API (the Next.js proxy used /api and /uploads on the same host)
    API_URL = os.getenv("API_URL", "http://localhost:5000/api")
    UPLOADS_URL = os.getenv("UPLOADS_URL", "http://localhost:5000/uploads")
    REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", 10))

    # Credential persistence
    CREDENTIAL_PATH = os.getenv(
        "CREDENTIAL_PATH", str(Path.home() / ".usermgmt" / "auth_data.json")
    )
    CREDENTIAL_TTL_DAYS = int(os.getenv("CREDENTIAL_TTL_DAYS", 30))

    # UI debounce after a successful login redirect (0 disables it)
    SETTLE_DELAY_SECONDS = float(os.getenv("SETTLE_DELAY_SECONDS", 1.0))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
