"""
JSON response envelope.

Two explicit serializers: json_success() for a payload, json_error() for
{"error": "<message>"}. The caller picks one based on what the store
returned; status_for_error() maps typed store errors to HTTP status codes.
"""

from typing import Any, Type, TypeVar, Union

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from api.schemas.subscriber import SubscriberOut
from core.errors import InvalidArgumentError, SubscriberStoreError
from core.logging import get_logger
from core.storage.base import SubscriberEntry


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _to_wire(payload: Any) -> Any:
    if isinstance(payload, SubscriberEntry):
        return SubscriberOut.from_entry(payload)
    if isinstance(payload, (list, tuple)):
        return [_to_wire(item) for item in payload]
    return payload


def json_success(payload: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """
    Serialize a successful result.

    Accepts a SubscriberEntry, a list of entries, a pydantic model or
    plain JSON-compatible data.
    """
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(_to_wire(payload)),
    )


def json_error(error: Union[str, Exception], status_code: int) -> JSONResponse:
    """Serialize a failure as {"error": "<message>"}."""
    if isinstance(error, SubscriberStoreError):
        message = error.message
    else:
        message = str(error)
    return JSONResponse(status_code=status_code, content={"error": message})


def status_for_error(exc: Exception) -> int:
    """
    HTTP status for a store error.

    AlreadySubscribedError -> 409, InvalidArgumentError -> 400,
    StorageError and anything unexpected -> 500.
    """
    if isinstance(exc, SubscriberStoreError):
        return exc.http_status
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc: Exception) -> JSONResponse:
    """json_error() with the status code chosen by status_for_error()."""
    status_code = status_for_error(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR and not isinstance(exc, SubscriberStoreError):
        # Store errors are logged where they happen
        logger.error("Unhandled error", error=str(exc), exc_info=exc)
    return json_error(exc, status_code)


def from_json(body: Union[bytes, str], model: Type[ModelT]) -> ModelT:
    """
    Decode a request body into a pydantic model.

    Raises InvalidArgumentError if the body is not valid JSON or does not
    match the model.
    """
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise InvalidArgumentError(f"invalid request body: {exc.error_count()} error(s)") from exc
