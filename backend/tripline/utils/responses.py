from typing import Any

from pydantic import BaseModel


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: _jsonable(value) for key, value in data.items()}
    return data


def success_response(data: Any, msg: str = "ok", code: int = 0) -> dict[str, Any]:
    """Wrap ``data`` in the ``{code, msg, data}`` envelope; models are dumped as JSON."""
    return {"code": code, "msg": msg, "data": _jsonable(data)}


def error_response(msg: str, code: int = 15000, data: Any = None) -> dict[str, Any]:
    return {"code": code, "msg": msg, "data": _jsonable(data)}
