# Fixtures compartilhadas: gateway Shopify roteirizado (sem rede)
from __future__ import annotations

import io

import pandas as pd
import pytest

from app.common.errors import RemoteError
from app.schemas.shopify_tracking import RemoteFulfillmentOrder, RemoteOrder


class FakeGateway:
    """Implementa ShopifyGateway com respostas fixas e registra cada chamada."""

    def __init__(
        self,
        pedidos: dict[str, RemoteOrder] | None = None,
        user_errors: dict[str, list[str]] | None = None,
        erros_busca: dict[str, RemoteError] | None = None,
        erros_fulfillment: dict[str, RemoteError] | None = None,
        pendentes: list[RemoteOrder] | None = None,
    ) -> None:
        self.pedidos = pedidos or {}
        self.user_errors = user_errors or {}
        self.erros_busca = erros_busca or {}
        self.erros_fulfillment = erros_fulfillment or {}
        self.pendentes = pendentes or []
        self.buscas: list[str] = []
        self.fulfillments: list[tuple[str, str, str | None]] = []

    @property
    def total_chamadas(self) -> int:
        return len(self.buscas) + len(self.fulfillments)

    def buscar_pedido(self, identificador: str) -> RemoteOrder | None:
        self.buscas.append(identificador)
        if identificador in self.erros_busca:
            raise self.erros_busca[identificador]
        return self.pedidos.get(identificador)

    def criar_fulfillment(self, fulfillment_order_id: str, tracking_number: str, carrier: str | None) -> list[str]:
        self.fulfillments.append((fulfillment_order_id, tracking_number, carrier))
        if fulfillment_order_id in self.erros_fulfillment:
            raise self.erros_fulfillment[fulfillment_order_id]
        return list(self.user_errors.get(fulfillment_order_id, []))

    def listar_pedidos_pendentes(self, limite: int) -> list[RemoteOrder]:
        return self.pendentes[:limite]


def make_order(name: str, *statuses: str, order_id: str | None = None) -> RemoteOrder:
    oid = order_id or f"gid://shopify/Order/{abs(hash(name)) % 10_000}"
    fos = [
        RemoteFulfillmentOrder(id=f"gid://shopify/FulfillmentOrder/{name.strip('#')}{i}", status=s)
        for i, s in enumerate(statuses, start=1)
    ]
    return RemoteOrder(id=oid, name=name, fulfillment_orders=fos)


def make_xlsx(rows: list[dict[str, object]], columns: list[str] | None = None) -> bytes:
    buf = io.BytesIO()
    pd.DataFrame(rows, columns=columns).to_excel(buf, index=False, engine="openpyxl")
    return buf.getvalue()


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()
