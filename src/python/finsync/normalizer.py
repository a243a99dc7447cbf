"""Map transport failures onto the fixed set of user-facing error categories."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from finsync.exceptions import (
    ConflictError,
    FinanceError,
    InvalidInputError,
    NetworkUnreachableError,
    RequestTimeoutError,
    ResponseError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnknownError,
)

logger = logging.getLogger(__name__)

NETWORK_MESSAGE = (
    "Não foi possível conectar ao servidor. Verifique se o backend está rodando."
)
TIMEOUT_MESSAGE = "O servidor demorou muito para responder. Tente novamente."
UNAUTHORIZED_MESSAGE = "Email ou senha incorretos"
CONFLICT_MESSAGE = "Usuário já cadastrado com este email"
INVALID_INPUT_MESSAGE = "Dados inválidos. Verifique os campos preenchidos."
SERVICE_UNAVAILABLE_MESSAGE = (
    "Serviço temporariamente indisponível. Tente novamente em alguns instantes."
)
GENERIC_MESSAGE = "Erro ao processar requisição"
UNKNOWN_MESSAGE = "Erro desconhecido"

STATUS_ERRORS: dict[int, tuple[type[FinanceError], str]] = {
    400: (InvalidInputError, INVALID_INPUT_MESSAGE),
    401: (UnauthorizedError, UNAUTHORIZED_MESSAGE),
    409: (ConflictError, CONFLICT_MESSAGE),
    503: (ServiceUnavailableError, SERVICE_UNAVAILABLE_MESSAGE),
}


def server_message(payload: Any) -> str | None:
    """Return the ``message`` or ``error`` field of an error body, if any."""
    if not isinstance(payload, Mapping):
        return None
    for key in ("message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def detail_messages(payload: Any) -> list[dict[str, Any]]:
    """Return field level validation details from a 400 body."""
    if not isinstance(payload, Mapping):
        return []
    details = payload.get("details")
    if not isinstance(details, list):
        return []
    return [item for item in details if isinstance(item, Mapping)]


def from_response(status: int, payload: Any, fallback: str | None = None) -> FinanceError:
    """Build a normalized error for an HTTP status and its decoded body."""
    details = detail_messages(payload) if status == 400 else []
    if details:
        joined = ", ".join(str(item.get("message", "")) for item in details if item.get("message"))
        message = joined or server_message(payload) or INVALID_INPUT_MESSAGE
        return InvalidInputError(message, status=status, details=details)

    error_class, default_message = STATUS_ERRORS.get(status, (UnknownError, None))
    message = server_message(payload) or default_message or fallback or GENERIC_MESSAGE
    return error_class(message, status=status)


def normalize_error(error: BaseException) -> FinanceError:
    """Normalize any failure into a :class:`FinanceError`.

    Already normalized errors are returned unchanged.
    """
    if isinstance(error, FinanceError):
        return error
    if isinstance(error, ResponseError):
        return from_response(error.status, error.payload, fallback=str(error) or None)
    # Timeout must be checked first: ConnectTimeout is also a ConnectionError
    if isinstance(error, requests.Timeout):
        return RequestTimeoutError(TIMEOUT_MESSAGE)
    if isinstance(error, requests.ConnectionError):
        return NetworkUnreachableError(NETWORK_MESSAGE)
    if isinstance(error, requests.RequestException):
        return UnknownError(str(error) or GENERIC_MESSAGE)

    logger.debug("Normalizing unexpected error %r", error)
    return UnknownError(str(error) or UNKNOWN_MESSAGE)
