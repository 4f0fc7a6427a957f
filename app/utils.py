import re, json, math, logging
import aiohttp

from app.config import HTTP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = aiohttp.ClientTimeout(total=HTTP_TIMEOUT_SECONDS)

SUBMIT_URL_RE = re.compile(r'https?://[^\s"\'<>]+/submit[^\s"\'<>]*', re.I)
ATOB_RE = re.compile(r'atob\(\s*([`"\'])([\s\S]+?)\1\s*\)', re.I)


class SubmitRejected(Exception):
    """Submit endpoint answered with an error status; keeps its body."""

    def __init__(self, status: int, response_data):
        super().__init__(f"Submit endpoint returned HTTP {status}")
        self.status = status
        self.response_data = response_data


def safe_compare(a: str | None, b: str | None) -> bool:
    # walks every position; only the length check may exit early
    if not a or not b:
        return False
    if len(a) != len(b):
        return False
    diff = 0
    for x, y in zip(a, b):
        diff |= ord(x) ^ ord(y)
    return diff == 0


def extract_submit_url(text: str) -> str | None:
    m = SUBMIT_URL_RE.search(text)
    return m.group(0) if m else None


def find_atob_literal(html: str) -> str | None:
    """First string literal passed to atob(), whitespace removed."""
    m = ATOB_RE.search(html)
    if not m:
        return None
    return re.sub(r"\s+", "", m.group(2))


def describe_error(exc: BaseException) -> str:
    # asyncio.TimeoutError stringifies to ""
    return str(exc) or exc.__class__.__name__


def _reject_constant(name):
    raise ValueError(f"non-finite JSON constant {name}")


def _finite_float(literal):
    value = float(literal)
    if not math.isfinite(value):
        raise ValueError(f"non-finite JSON number {literal}")
    return value


def loads_finite(txt: str):
    """json.loads that rejects NaN, Infinity and overflowing numbers."""
    return json.loads(txt, parse_constant=_reject_constant, parse_float=_finite_float)


def _parse_body(txt: str):
    try:
        return loads_finite(txt)
    except ValueError:
        return txt


async def http_post_json(url: str, payload: dict):
    async with aiohttp.ClientSession(timeout=HTTP_TIMEOUT) as s:
        async with s.post(url, json=payload) as r:
            txt = await r.text(errors="replace")
            data = _parse_body(txt)
            if r.status >= 400:
                raise SubmitRejected(r.status, data)
            return data
