import re, base64, binascii, math, logging
import pandas as pd
from bs4 import BeautifulSoup

from app.config import SNIPPET_LENGTH
from app.utils import find_atob_literal, loads_finite

logger = logging.getLogger(__name__)

TABLE_RE = re.compile(r'<table\b[^>]*>([\s\S]*?)</table>', re.I)
ROW_RE = re.compile(r'<tr\b[^>]*>([\s\S]*?)</tr>', re.I)
CELL_RE = re.compile(r'<t([hd])\b[^>]*>([\s\S]*?)</t\1>', re.I)
VALUE_HEADER_RE = re.compile(r'\bvalue\b')


def decode_atob_payload(literal: str) -> str | None:
    """Strict base64 + utf-8 decode; None when either step fails."""
    try:
        return base64.b64decode(literal, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None


def from_base64_literal(html: str):
    literal = find_atob_literal(html)
    if literal is None:
        return None
    text = decode_atob_payload(literal)
    if text is None:
        logger.info("atob literal found but could not be decoded")
        return {"raw_base64": literal}
    try:
        parsed = loads_finite(text)
    except ValueError:
        parsed = None
    if isinstance(parsed, dict):
        parsed.setdefault("answer", None)
        return parsed
    return {"decoded_text": text}


def _cell_text(fragment: str) -> str:
    return BeautifulSoup(fragment, "lxml").get_text(" ", strip=True)


def parse_first_table(html: str) -> list[list[str]]:
    m = TABLE_RE.search(html)
    if not m:
        return []
    rows = []
    for row_html in ROW_RE.findall(m.group(1)):
        rows.append([_cell_text(c) for _, c in CELL_RE.findall(row_html)])
    return rows


def from_value_table(html: str):
    rows = parse_first_table(html)
    if len(rows) < 2:
        return None
    col = None
    for i, h in enumerate(rows[0]):
        if VALUE_HEADER_RE.search(h.lower()):
            col = i; break
    if col is None:
        return None
    cells = pd.Series([r[col] for r in rows[1:] if len(r) > col], dtype="object")
    # drop currency symbols, thousands separators and the like
    nums = pd.to_numeric(cells.str.replace(r"[^0-9.\-]", "", regex=True), errors="coerce")
    nums = nums.astype("float64").replace([math.inf, -math.inf], math.nan)
    if not nums.notna().any():
        return None
    total = float(nums.sum())
    if not math.isfinite(total):
        return None
    return int(total) if total.is_integer() else total


def snippet(html: str):
    return {
        "info": "No base64 or value table found, returning HTML snippet",
        "snippet": html[:SNIPPET_LENGTH],
    }


# Tried in order; the first non-None answer wins, snippet otherwise.
STRATEGIES = [
    ("base64_literal", from_base64_literal),
    ("value_table", from_value_table),
]


def extract_answer(html: str) -> tuple:
    for name, strategy in STRATEGIES:
        answer = strategy(html)
        if answer is not None:
            logger.info("Answer derived by %s strategy", name)
            return answer, name
    logger.info("No structured answer found, falling back to snippet")
    return snippet(html), "snippet"
