from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, cast

import requests

from app.common.errors import RemoteError
from app.common.http_client import default_timeout, get_session, http_post
from app.common.logging_setup import get_logger
from app.common.settings import settings
from app.schemas.shopify_tracking import RemoteFulfillmentOrder, RemoteOrder
from app.services.shopify_fulfillment import montar_fulfillment_input
from app.utils.utils_helpers import normalizar_order_id

logger = get_logger(__name__)


def obter_api_shopify_version(now: datetime | None = None) -> str:
    """
    Retorna a versão trimestral da Shopify API (YYYY-01/04/07/10).
    Usa datetime aware (UTC por padrão). 'now' é opcional (útil para testes).
    """
    dt = now or datetime.now(UTC)
    q_start = ((dt.month - 1) // 3) * 3 + 1  # 1, 4, 7, 10
    return f"{dt.year}-{q_start:02d}"


def montar_busca_pedido(identificador: str) -> str:
    """
    Busca por nome (ex.: #1001) OU id. O filtro `id:` só entra quando o
    identificador é numérico (ou um gid), senão a Shopify rejeita a busca.
    """
    ident = identificador.strip()
    escapado = ident.replace("\\", "\\\\").replace('"', '\\"')
    termos = [f'name:"{escapado}"']
    num = normalizar_order_id(ident)
    if num.isdigit():
        termos.append(f"id:{num}")
    return " OR ".join(termos)


_QUERY_ORDER = """
query getOrder($query: String!) {
  orders(first: 1, query: $query) {
    edges {
      node {
        id
        name
        fulfillmentOrders(first: 10) {
          edges {
            node {
              id
              status
            }
          }
        }
      }
    }
  }
}
""".strip()

_QUERY_UNFULFILLED = """
query pendingOrders($first: Int!) {
  orders(first: $first, query: "fulfillment_status:unfulfilled") {
    edges {
      node {
        id
        name
      }
    }
  }
}
""".strip()

_MUTATION_CREATE = """
mutation fulfillmentCreate($fulfillment: FulfillmentV2Input!) {
  fulfillmentCreateV2(fulfillment: $fulfillment) {
    fulfillment { id status }
    userErrors { field message }
  }
}
""".strip()


def _malformado(contexto: str) -> RemoteError:
    return RemoteError(f"Malformed response from Shopify ({contexto})", code="MALFORMED_RESPONSE")


def _objeto(valor: Any, contexto: str) -> Mapping[str, Any]:
    if not isinstance(valor, Mapping):
        raise _malformado(contexto)
    return valor


def _edges(conn: Any, contexto: str) -> list[Mapping[str, Any]]:
    if conn is None:
        return []
    edges = _objeto(conn, contexto).get("edges") or []
    if not isinstance(edges, list):
        raise _malformado(contexto)
    return [_objeto(_objeto(e, contexto).get("node"), contexto) for e in edges]


def _parse_order(node: Mapping[str, Any]) -> RemoteOrder:
    if not node.get("id"):
        raise _malformado("order without id")
    fos = [
        RemoteFulfillmentOrder(id=str(fo.get("id") or ""), status=str(fo.get("status") or ""))
        for fo in _edges(node.get("fulfillmentOrders"), "fulfillmentOrders")
    ]
    return RemoteOrder(id=str(node["id"]), name=str(node.get("name") or ""), fulfillment_orders=fos)


class ShopifyGraphQLClient:
    """Implementação de ShopifyGateway sobre a Admin GraphQL API (token já autenticado)."""

    def __init__(
        self,
        shop_url: str,
        access_token: str,
        *,
        api_version: str | None = None,
        session: requests.Session | None = None,
        timeout: tuple[float, float] | None = None,
    ) -> None:
        self.shop_url = shop_url.strip().removeprefix("https://").rstrip("/")
        self.access_token = access_token
        self.api_version = api_version or obter_api_shopify_version()
        self.session = get_session(session)
        self.timeout = timeout or default_timeout()

    @classmethod
    def from_settings(cls) -> ShopifyGraphQLClient:
        return cls(
            settings.SHOP_URL,
            settings.SHOPIFY_TOKEN,
            api_version=settings.SHOPIFY_API_VERSION or None,
        )

    @property
    def graphql_url(self) -> str:
        return f"https://{self.shop_url}/admin/api/{self.api_version}/graphql.json"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.access_token,
        }

    def _executar(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """POST único (sem re-tentativa). Retorna `data`; erros GraphQL viram RemoteError."""
        r = http_post(
            self.graphql_url,
            json={"query": query, "variables": variables},
            headers=self._headers(),
            session=self.session,
            timeout=self.timeout,
        )
        try:
            payload = r.json()
        except ValueError as e:
            raise RemoteError(
                "Malformed response from Shopify (invalid JSON)", code="MALFORMED_RESPONSE", cause=e
            ) from e

        if not isinstance(payload, dict):
            raise _malformado("not an object")

        errors = payload.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            msg = first.get("message") if isinstance(first, dict) else str(first)
            raise RemoteError(str(msg), code="GRAPHQL_ERROR", data={"errors": errors})

        data = payload.get("data")
        if not isinstance(data, dict):
            raise _malformado("no data")
        return cast(dict[str, Any], data)

    def buscar_pedido(self, identificador: str) -> RemoteOrder | None:
        data = self._executar(_QUERY_ORDER, {"query": montar_busca_pedido(identificador)})
        if "orders" not in data:
            raise _malformado("no orders")
        nodes = _edges(data.get("orders"), "orders")
        # primeiro resultado vence, sem desambiguação
        return _parse_order(nodes[0]) if nodes else None

    def criar_fulfillment(self, fulfillment_order_id: str, tracking_number: str, carrier: str | None) -> list[str]:
        fulfillment = montar_fulfillment_input(fulfillment_order_id, tracking_number, carrier)
        data = self._executar(_MUTATION_CREATE, {"fulfillment": fulfillment})
        resultado = _objeto(data.get("fulfillmentCreateV2") or {}, "fulfillmentCreateV2")
        user_errors = resultado.get("userErrors") or []
        if not isinstance(user_errors, list):
            raise _malformado("userErrors")
        return [str(_objeto(e, "userErrors").get("message") or "Unknown error") for e in user_errors]

    def listar_pedidos_pendentes(self, limite: int = 3) -> list[RemoteOrder]:
        data = self._executar(_QUERY_UNFULFILLED, {"first": limite})
        return [
            RemoteOrder(id=str(n.get("id") or ""), name=str(n.get("name") or ""))
            for n in _edges(data.get("orders"), "orders")
        ]
