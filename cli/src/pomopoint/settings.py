"""Settings loaded from the environment (and a .env file via python-dotenv)."""

import os

from dotenv import load_dotenv


def pomopoint_home() -> str:
    return os.path.expanduser(os.getenv("POMOPOINT_HOME", "~/.pomopoint"))


def load_config() -> dict:
    load_dotenv()
    home = pomopoint_home()
    database_url = os.getenv("POMOPOINT_DATABASE_URL")
    if not database_url:
        os.makedirs(home, exist_ok=True)
        database_url = f"sqlite:///{os.path.join(home, 'pomopoint.db')}"
    return {
        "home": home,
        "database_url": database_url,
        "user_id": os.getenv("POMOPOINT_USER_ID") or os.getenv("USER") or "local",
        "api_url": os.getenv("POMOPOINT_API_URL", "http://localhost:8000"),
        "timezone": os.getenv("POMOPOINT_TIMEZONE"),
    }
