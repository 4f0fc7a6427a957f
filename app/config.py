import logging
import os

from dotenv import load_dotenv

load_dotenv()

# Read once at import; the handler receives it through create_app()
QUIZ_SECRET = os.getenv("TDS_SECRET", "")

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "20"))
SNIPPET_LENGTH = int(os.getenv("SNIPPET_LENGTH", "2000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
