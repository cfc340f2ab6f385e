from __future__ import annotations

from app.common.errors import RemoteError
from app.common.logging_setup import get_logger
from app.schemas.shopify_tracking import PedidoResolvido, RemoteOrder, RowErrorKind, RowFailure
from app.services.shopify_gateway import ShopifyGateway

logger = get_logger(__name__)


def escolher_fulfillment_order(pedido: RemoteOrder) -> str | None:
    """Primeiro fulfillment order (na ordem devolvida pela Shopify) OPEN ou IN_PROGRESS."""
    for fo in pedido.fulfillment_orders:
        if fo.elegivel:
            return fo.id
    return None


def resolver_pedido(gateway: ShopifyGateway, identificador: str) -> PedidoResolvido | RowFailure:
    try:
        pedido = gateway.buscar_pedido(identificador)
    except RemoteError as e:
        logger.warning("busca_pedido_remote_error", extra={"order": identificador, "code": e.code})
        return RowFailure(kind=RowErrorKind.REMOTE_ERROR, order_identifier=identificador, detail=e.message)

    if pedido is None:
        return RowFailure(kind=RowErrorKind.ORDER_NOT_FOUND, order_identifier=identificador)

    fo_id = escolher_fulfillment_order(pedido)
    if fo_id is None:
        logger.info(
            "pedido_sem_fulfillment_aberto",
            extra={"order": identificador, "statuses": [fo.status for fo in pedido.fulfillment_orders]},
        )
        return RowFailure(kind=RowErrorKind.NO_ELIGIBLE_FULFILLMENT, order_identifier=identificador)

    return PedidoResolvido(order=pedido, fulfillment_order_id=fo_id)
