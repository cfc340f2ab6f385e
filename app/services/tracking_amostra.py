from __future__ import annotations

import pandas as pd

from app.common.logging_setup import get_logger
from app.services.shopify_gateway import ShopifyGateway

logger = get_logger(__name__)

COLUNAS_AMOSTRA = ["Order Name", "Tracking Number", "Tracking Company"]

# usado quando a loja ainda não tem pedidos pendentes
LINHAS_FALLBACK: list[list[str]] = [
    ["#1001", "TEST-TRACK-1", "DHL"],
    ["#1002", "TEST-TRACK-2", "FedEx"],
    ["#1003", "TEST-TRACK-3", "UPS"],
]


def gerar_csv_amostra(gateway: ShopifyGateway, limite: int = 3) -> str:
    """CSV de exemplo preenchido com pedidos reais ainda não atendidos."""
    pedidos = gateway.listar_pedidos_pendentes(limite)
    linhas = [[p.name, f"SAMPLE-TRACK-{1000 + i}", "FedEx"] for i, p in enumerate(pedidos) if p.name]
    if not linhas:
        linhas = LINHAS_FALLBACK

    logger.info("amostra_gerada", extra={"pedidos_reais": len(pedidos), "linhas": len(linhas)})
    return pd.DataFrame(linhas, columns=COLUNAS_AMOSTRA).to_csv(index=False, lineterminator="\n")
