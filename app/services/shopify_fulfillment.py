from __future__ import annotations

from typing import Any

from app.common.errors import RemoteError
from app.common.logging_setup import get_logger
from app.schemas.shopify_tracking import RowErrorKind, RowFailure, RowOutcome, RowSuccess, ShipmentRecord
from app.services.shopify_gateway import ShopifyGateway

logger = get_logger(__name__)


def montar_fulfillment_input(
    fulfillment_order_id: str, tracking_number: str, carrier: str | None = None
) -> dict[str, Any]:
    """
    Monta o FulfillmentV2Input de um único fulfillment order (todas as linhas pendentes).
    `trackingInfo.company` só entra quando há transportadora; sem ela a Shopify infere.
    """
    tracking_info: dict[str, Any] = {"number": tracking_number}
    carrier = (carrier or "").strip()
    if carrier:
        tracking_info["company"] = carrier

    return {
        "lineItemsByFulfillmentOrder": [{"fulfillmentOrderId": fulfillment_order_id}],
        "trackingInfo": tracking_info,
    }


def despachar_fulfillment(
    gateway: ShopifyGateway, fulfillment_order_id: str, registro: ShipmentRecord
) -> RowOutcome:
    """Chama fulfillmentCreateV2 para o registro; userErrors ou falha remota viram RowFailure."""
    oid = registro.order_identifier
    try:
        user_errors = gateway.criar_fulfillment(fulfillment_order_id, registro.tracking_number, registro.carrier_name)
    except RemoteError as e:
        logger.warning("fulfillment_remote_error", extra={"order": oid, "code": e.code})
        return RowFailure(kind=RowErrorKind.REMOTE_ERROR, order_identifier=oid, detail=e.message)

    if user_errors:
        logger.info("fulfillment_user_errors", extra={"order": oid, "user_errors": user_errors})
        return RowFailure(kind=RowErrorKind.REMOTE_USER_ERROR, order_identifier=oid, detail=user_errors[0])

    return RowSuccess(order_identifier=oid, fulfillment_order_id=fulfillment_order_id)
