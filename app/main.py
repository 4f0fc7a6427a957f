import logging
import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import QUIZ_SECRET
from app.solver import solve_quiz
from app.utils import safe_compare, describe_error

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Missing required fields: email, secret, url"


class QuizRequest(BaseModel):
    email: str = Field(min_length=1)
    secret: str = Field(min_length=1)
    url: str = Field(min_length=1)


def create_app(secret: str) -> FastAPI:
    """Build the API; `secret` is the only value requests are checked against."""
    app = FastAPI(title="Quiz Relay")

    @app.exception_handler(StarletteHTTPException)
    async def error_body(request: Request, exc: StarletteHTTPException):
        detail = "Method not allowed" if exc.status_code == 405 else exc.detail
        return JSONResponse(status_code=exc.status_code, content={"error": detail},
                            headers=getattr(exc, "headers", None))

    @app.post("/solve")
    async def solve(request: Request):
        try:
            body = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON")
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail=MISSING_FIELDS)
        try:
            req = QuizRequest.model_validate(body)
        except ValidationError:
            raise HTTPException(status_code=400, detail=MISSING_FIELDS)

        if not safe_compare(req.secret, secret):
            raise HTTPException(status_code=403, detail="Invalid secret")

        # once authenticated, always 200; `ok` carries the outcome
        try:
            result = await solve_quiz(req.url, req.email, req.secret)
        except Exception as e:
            logger.exception("Solving %s failed", req.url)
            return {"ok": False, "error": describe_error(e)}
        return {"ok": True, "result": result}

    return app


app = create_app(QUIZ_SECRET)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
