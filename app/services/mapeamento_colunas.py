from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import NamedTuple

from app.common.errors import SchemaResolutionError
from app.common.logging_setup import get_logger
from app.schemas.shopify_tracking import ColumnMapping

logger = get_logger(__name__)


class Regra(NamedTuple):
    nome: str
    aceita: Callable[[str], bool]  # recebe o cabeçalho já em minúsculas


# Regras por campo, em ordem de prioridade. Um cabeçalho casa com o campo se
# satisfizer QUALQUER regra da lista; o primeiro cabeçalho (na ordem do
# arquivo) que casar vence. Campos são resolvidos de forma independente, então
# "Order Tracking Company" pode servir a pedido e transportadora ao mesmo tempo.
REGRAS_PEDIDO: tuple[Regra, ...] = (
    Regra("contem_order", lambda h: "order" in h),
    Regra("contem_name", lambda h: "name" in h),
    Regra("igual_id", lambda h: h == "id"),
)

REGRAS_TRACKING: tuple[Regra, ...] = (
    Regra(
        "tracking_sem_company_e_url",
        lambda h: "tracking" in h and "company" not in h and "url" not in h,
    ),
)

REGRAS_TRANSPORTADORA: tuple[Regra, ...] = (
    Regra("contem_company", lambda h: "company" in h),
    Regra("contem_carrier", lambda h: "carrier" in h),
)


def _primeiro_cabecalho(headers: Sequence[str], regras: Sequence[Regra]) -> tuple[str, str] | None:
    """Retorna (cabeçalho original, nome da regra) do primeiro cabeçalho aceito."""
    for header in headers:
        h = str(header).strip().lower()
        for regra in regras:
            if regra.aceita(h):
                return header, regra.nome
    return None


def inferir_colunas(headers: Sequence[str]) -> ColumnMapping:
    """Descobre as colunas de pedido, rastreio e (opcional) transportadora."""
    headers = list(headers)
    pedido = _primeiro_cabecalho(headers, REGRAS_PEDIDO)
    tracking = _primeiro_cabecalho(headers, REGRAS_TRACKING)
    transportadora = _primeiro_cabecalho(headers, REGRAS_TRANSPORTADORA)

    if pedido is None or tracking is None:
        logger.warning("schema_nao_resolvido", extra={"headers": headers})
        raise SchemaResolutionError(headers)

    mapping = ColumnMapping(
        order_header=pedido[0],
        tracking_header=tracking[0],
        carrier_header=transportadora[0] if transportadora else None,
    )
    logger.info(
        "schema_resolvido",
        extra={
            "order_header": mapping.order_header,
            "order_rule": pedido[1],
            "tracking_header": mapping.tracking_header,
            "carrier_header": mapping.carrier_header,
        },
    )
    return mapping
