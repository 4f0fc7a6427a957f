import asyncio, logging
import aiohttp

from app.scraper import fetch_quiz_page_html
from app.extractor import extract_answer, decode_atob_payload
from app.utils import (
    extract_submit_url, find_atob_literal, http_post_json,
    describe_error, SubmitRejected
)

logger = logging.getLogger(__name__)


def locate_submit_url(html: str) -> tuple[str | None, str | None]:
    submit_url = extract_submit_url(html)
    if submit_url:
        return submit_url, "page"
    # sometimes only inside the decoded atob text
    literal = find_atob_literal(html)
    decoded = decode_atob_payload(literal) if literal else None
    if decoded:
        submit_url = extract_submit_url(decoded)
        if submit_url:
            logger.info("No submit URL in page text; using %s from decoded atob payload", submit_url)
            return submit_url, "decoded payload"
    return None, None


async def submit_answer(submit_url: str, payload: dict):
    """Post the answer; a failed submission is returned as data, never raised."""
    try:
        return await http_post_json(submit_url, payload)
    except SubmitRejected as e:
        logger.warning("Submit to %s rejected: %s", submit_url, e)
        return {"error": describe_error(e), "responseData": e.response_data}
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.warning("Submit to %s failed: %r", submit_url, e)
        return {"error": describe_error(e), "responseData": None}


async def solve_quiz(url: str, email: str, secret: str) -> dict:
    # fetch errors propagate to the caller
    html = await fetch_quiz_page_html(url)
    notes = []

    answer, strategy = extract_answer(html)
    notes.append(f"answer from {strategy}")

    submit_url, source = locate_submit_url(html)
    submit_response = None
    if submit_url:
        notes.append(f"submit url from {source}")
        payload = {
            "email": email,
            "secret": secret,
            "url": url,
            "answer": answer
        }
        submit_response = await submit_answer(submit_url, payload)
    else:
        notes.append("no submit url found")

    return {
        "submitUrl": submit_url,
        "answer": answer,
        "submit_response": submit_response,
        "notes": notes,
    }
