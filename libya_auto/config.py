import os

from dotenv import load_dotenv

load_dotenv()

API_URL = os.environ.get("API_URL", "http://localhost:5000").rstrip("/")
SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", os.urandom(24))
API_TIMEOUT = float(os.environ.get("API_TIMEOUT", "10"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOCALES = ("en", "ar")
DEFAULT_LOCALE = "ar"
FALLBACK_LOCALE = "en"
LOCALE_COOKIE = "NEXT_LOCALE"
RTL_LOCALES = {"ar"}

# Paths the locale redirect never touches.
UNLOCALIZED_PREFIXES = ("/static", "/api", "/images", "/favicon.ico")

PLACEHOLDER_IMAGE = "/static/placeholder.svg"
ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp", "svg"}

TOKEN_KEY = "libya-auto-token"
USER_KEY = "libya-auto-user"

CAR_TYPES = (
    "SEDAN",
    "SUV",
    "PICKUP",
    "BERLIN",
    "COMPACT",
    "COUPE",
    "CABRIOLET",
    "MONOSPACE",
)
