# app/common/errors.py
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """
    Erro base da aplicação.
      - code: identificador estável (ex.: "HTTP_TIMEOUT", "EMPTY_INPUT")
      - cause: exceção original, quando houver
      - data: contexto extra para log/diagnóstico
    """

    code: str = "APP_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        cause: BaseException | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.code
        self.cause = cause
        self.data = data or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------
# Erros de lote (abortam antes de processar linhas)
# ---------------------------
class DecodeError(AppError):
    code = "DECODE_ERROR"


class UnsupportedFormat(DecodeError):
    code = "UNSUPPORTED_FORMAT"


class ParseError(DecodeError):
    code = "PARSE_ERROR"


class EmptyInput(DecodeError):
    code = "EMPTY_INPUT"


class SchemaResolutionError(AppError):
    code = "SCHEMA_RESOLUTION"

    def __init__(self, headers: list[str]) -> None:
        super().__init__(
            "Could not identify 'Order' and 'Tracking Number' columns. "
            f"Found columns: {', '.join(headers)}",
            data={"headers": list(headers)},
        )
        self.headers = list(headers)


# ---------------------------
# Falhas de comunicação com a Shopify (nunca re-tentadas)
# ---------------------------
class RemoteError(AppError):
    code = "REMOTE_ERROR"
