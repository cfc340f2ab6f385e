from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# Linha crua da planilha: cabeçalho original -> texto da célula ("" quando vazia)
RawRow = Mapping[str, str]


# -------------------------
# Projeção dos dados da Shopify
# -------------------------
class FulfillmentOrderStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"
    INCOMPLETE = "INCOMPLETE"
    ON_HOLD = "ON_HOLD"
    SCHEDULED = "SCHEDULED"


ELIGIBLE_STATUSES: frozenset[str] = frozenset(
    {FulfillmentOrderStatus.OPEN.value, FulfillmentOrderStatus.IN_PROGRESS.value}
)


class RemoteFulfillmentOrder(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    # string livre: status desconhecidos são aceitos e tratados como não elegíveis
    status: str

    @property
    def elegivel(self) -> bool:
        return self.status.upper() in ELIGIBLE_STATUSES


class RemoteOrder(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    fulfillment_orders: list[RemoteFulfillmentOrder] = Field(default_factory=list)


# -------------------------
# Entrada normalizada
# -------------------------
class ColumnMapping(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_header: str
    tracking_header: str
    carrier_header: str | None = None


class ShipmentRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_identifier: str = Field(..., min_length=1)
    tracking_number: str = Field(..., min_length=1)
    carrier_name: str | None = None


# -------------------------
# Resultado por linha (união etiquetada)
# -------------------------
class RowErrorKind(str, Enum):
    MISSING_REQUIRED_FIELD = "missing_required_field"
    ORDER_NOT_FOUND = "order_not_found"
    NO_ELIGIBLE_FULFILLMENT = "no_eligible_fulfillment"
    REMOTE_USER_ERROR = "remote_user_error"
    REMOTE_ERROR = "remote_error"


class RowSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    order_identifier: str
    fulfillment_order_id: str


class RowFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    kind: RowErrorKind
    order_identifier: str = ""
    row_number: int | None = None
    detail: str = ""

    def message(self) -> str:
        """Texto exibido ao lojista no log de erros do lote."""
        oid = self.order_identifier
        if self.kind is RowErrorKind.MISSING_REQUIRED_FIELD:
            return f"Missing order or tracking number in row {self.row_number}"
        if self.kind is RowErrorKind.ORDER_NOT_FOUND:
            return f"Order not found: {oid}"
        if self.kind is RowErrorKind.NO_ELIGIBLE_FULFILLMENT:
            return f"No open fulfillment order for: {oid}"
        if self.kind is RowErrorKind.REMOTE_USER_ERROR:
            return f"Failed to fulfill {oid}: {self.detail}"
        return f"Error processing {oid}: {self.detail}"


RowOutcome = Union[RowSuccess, RowFailure]


class PedidoResolvido(BaseModel):
    model_config = ConfigDict(frozen=True)

    order: RemoteOrder
    fulfillment_order_id: str


# -------------------------
# Saída do lote
# -------------------------
class BatchOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    success_count: int = 0
    failure_count: int = 0
    errors: list[str] = Field(default_factory=list, description="Mensagens por linha (máx. 50 + marcador)")


class TrackingImportResponse(BaseModel):
    status: Literal["success", "error"]
    results: BatchOutcome | None = None
    message: str | None = Field(default=None, description="Motivo da rejeição do lote inteiro")

    @classmethod
    def sucesso(cls, outcome: BatchOutcome) -> TrackingImportResponse:
        return cls(status="success", results=outcome)

    @classmethod
    def erro(cls, message: str) -> TrackingImportResponse:
        return cls(status="error", message=message)
