"""Error taxonomy for the API. Every error renders to a JSON body with an `error` key."""
from typing import Any, Optional


class ApiError(Exception):
    status_code = 500
    default_message = "Erro interno do servidor."

    def __init__(self, message: Optional[str] = None, details: Any = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_payload(self) -> dict:
        payload = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(ApiError):
    """Malformed or missing request fields."""
    status_code = 400
    default_message = "Requisição inválida."


class ConfigurationError(ApiError):
    """Missing credential. Fails the request, never the process."""
    status_code = 500
    default_message = "GEMINI_API_KEY não configurada no servidor."


class UpstreamError(ApiError):
    """Non-success response from the generative-language service.

    `details` carries the upstream body untouched.
    """
    status_code = 502
    default_message = "Falha ao se comunicar com a Gemini API."


class UpstreamTimeout(ApiError):
    status_code = 504
    default_message = "A Gemini API não respondeu a tempo."


class UpstreamUnavailable(ApiError):
    status_code = 500
    default_message = "Erro interno ao consultar a Gemini API."


class ShapingFailure(ApiError):
    """The model reply held nothing usable."""
    status_code = 500
    default_message = "Não foi possível extrair dados válidos da resposta do modelo."


class ClientDisconnected(ApiError):
    # nginx convention; the client never sees it
    status_code = 499
    default_message = "Cliente desconectou antes da resposta."


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Rota não encontrada."
