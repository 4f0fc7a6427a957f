import logging
import aiohttp

from app.utils import HTTP_TIMEOUT

logger = logging.getLogger(__name__)


async def fetch_quiz_page_html(url: str) -> str:
    # status is not checked: an error page is still text to scan
    async with aiohttp.ClientSession(timeout=HTTP_TIMEOUT) as s:
        async with s.get(url, allow_redirects=True) as r:
            html = await r.text(errors="replace")
            logger.info("Fetched %s (HTTP %s, %d chars)", url, r.status, len(html))
            return html
