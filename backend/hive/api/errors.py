"""Error translation and global handlers that include request_id in JSON bodies."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hive.api.request_id import get_request_id
from hive.domain.exceptions import HiveError
from hive.infra.rate_limit import RateLimitExceeded

logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
	"authentication": status.HTTP_401_UNAUTHORIZED,
	"authorization": status.HTTP_403_FORBIDDEN,
	"not_found": status.HTTP_404_NOT_FOUND,
	"conflict": status.HTTP_409_CONFLICT,
	"invalid": status.HTTP_422_UNPROCESSABLE_ENTITY,
	"persistence": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _retry_headers(exc: RateLimitExceeded) -> dict[str, str] | None:
	if exc.retry_after is None:
		return None
	return {"Retry-After": str(exc.retry_after)}


def to_http_error(exc: Exception) -> HTTPException:
	"""Translate domain exceptions to FastAPI HTTP errors."""
	if isinstance(exc, RateLimitExceeded):
		return HTTPException(
			status.HTTP_429_TOO_MANY_REQUESTS,
			detail=exc.reason,
			headers=_retry_headers(exc),
		)
	if isinstance(exc, HiveError):
		code = _STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
		return HTTPException(code, detail=exc.reason)
	return HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc))


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		payload = {"detail": exc.detail, "request_id": get_request_id(request)}
		return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		payload = {
			"detail": "validation_error",
			"errors": jsonable_errors(exc),
			"request_id": get_request_id(request),
		}
		return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=payload)

	@app.exception_handler(HiveError)
	async def domain_exc_handler(request: Request, exc: HiveError):  # type: ignore[override]
		if exc.code == "persistence":
			logger.error("persistence failure", exc_info=exc)
		http_exc = to_http_error(exc)
		payload = {"detail": http_exc.detail, "request_id": get_request_id(request)}
		return JSONResponse(status_code=http_exc.status_code, content=payload)

	@app.exception_handler(RateLimitExceeded)
	async def rate_limit_handler(request: Request, exc: RateLimitExceeded):  # type: ignore[override]
		payload = {"detail": exc.reason, "request_id": get_request_id(request)}
		return JSONResponse(
			status_code=status.HTTP_429_TOO_MANY_REQUESTS,
			content=payload,
			headers=_retry_headers(exc),
		)


def jsonable_errors(exc: RequestValidationError) -> list:
	# pydantic may embed the raw exception under ctx, which is not JSON serializable
	errors = []
	for error in exc.errors():
		item = dict(error)
		if "ctx" in item:
			item["ctx"] = {key: str(value) for key, value in item["ctx"].items()}
		errors.append(item)
	return errors
