from typing import Any, Optional

from fastapi.encoders import jsonable_encoder

from utils.helper import page_count, to_iso, utcnow


def _timestamp() -> str:
    return to_iso(utcnow())


def success_response(message: str, data: Any = None) -> dict:
    return {
        "success": True,
        "message": message,
        "data": jsonable_encoder(data),
        "timestamp": _timestamp(),
    }


def error_response(message: str, errors: Optional[Any] = None) -> dict:
    body = {
        "success": False,
        "message": message,
        "timestamp": _timestamp(),
    }
    if errors is not None:
        body["errors"] = jsonable_encoder(errors)
    return body


def paginated_response(message: str, data: list, page: int, limit: int, total: int) -> dict:
    body = success_response(message, data)
    body["pagination"] = {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": page_count(total, limit),
    }
    return body
