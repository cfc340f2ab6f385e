from __future__ import annotations

from typing import Protocol

from app.schemas.shopify_tracking import RemoteOrder


class ShopifyGateway(Protocol):
    """
    Capacidades remotas consumidas pela importação de rastreios.
    Falhas de transporte/resposta são levantadas como RemoteError.
    """

    def buscar_pedido(self, identificador: str) -> RemoteOrder | None:
        """Primeiro pedido cujo nome OU id bate com o identificador (None se nenhum)."""
        ...

    def criar_fulfillment(self, fulfillment_order_id: str, tracking_number: str, carrier: str | None) -> list[str]:
        """Cria o fulfillment e devolve as mensagens de userErrors (vazia = sucesso)."""
        ...

    def listar_pedidos_pendentes(self, limite: int) -> list[RemoteOrder]:
        ...
