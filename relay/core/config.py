# config.py
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=False)

PACKAGE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Config:
    """Base configuration class"""
    # Server
    PORT = int(os.getenv("PORT", "5000"))

    # Managed hosting (Vercel) owns the socket, so app.run must not be called
    MANAGED_HOSTING = os.getenv("VERCEL") == "1"

    # Upstream aniwatch / hianime API
    HIANIME_API_URL = os.getenv("HIANIME_API_URL", "http://localhost:4000/api/v2/hianime")
    HIANIME_TIMEOUT = float(os.getenv("HIANIME_TIMEOUT", "8"))

    # "fetch": dub is a separate category request to the same provider
    # "unavailable": provider has no dub feed, dub is never requested
    DUB_POLICY = os.getenv("DUB_POLICY", "fetch")
    DEFAULT_SERVER = os.getenv("DEFAULT_SERVER", "hd-2")

    # Media proxy
    PROXY_REFERER = os.getenv("PROXY_REFERER", "https://vidwish.live/")
    PROXY_USER_AGENT = os.getenv("PROXY_USER_AGENT", DEFAULT_USER_AGENT)
    PROXY_TIMEOUT = float(os.getenv("PROXY_TIMEOUT", "5"))

    # Embeddable player page
    EMBED_PAGE = os.getenv("EMBED_PAGE", str(PACKAGE_DIR / "static" / "embed.html"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Application settings
    DEBUG = os.getenv("FLASK_ENV") == "development"
    TESTING = False


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    LOG_LEVEL = "DEBUG"


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": ProductionConfig,
}
