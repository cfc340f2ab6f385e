from __future__ import annotations

import time

from app.common.errors import DecodeError, SchemaResolutionError
from app.common.logging_setup import get_logger
from app.common.settings import settings
from app.schemas.shopify_tracking import (
    BatchOutcome,
    ColumnMapping,
    RawRow,
    RowErrorKind,
    RowFailure,
    RowOutcome,
    ShipmentRecord,
    TrackingImportResponse,
)
from app.services.mapeamento_colunas import inferir_colunas
from app.services.planilha_tracking import ler_planilha
from app.services.shopify_busca_pedido import resolver_pedido
from app.services.shopify_fulfillment import despachar_fulfillment
from app.services.shopify_gateway import ShopifyGateway

logger = get_logger(__name__)

MARCADOR_EXCESSO = "...and more errors."


class AcumuladorLote:
    """
    Contadores + log de erros limitado. Passado o limite, entra um único
    marcador e nada mais é anexado; os contadores continuam contando.
    """

    def __init__(self, limite_erros: int = 50) -> None:
        self.limite_erros = limite_erros
        self.sucessos = 0
        self.falhas = 0
        self.erros: list[str] = []
        self._truncado = False

    def registrar(self, resultado: RowOutcome) -> None:
        if isinstance(resultado, RowFailure):
            self.falhas += 1
            self._anexar_erro(resultado.message())
        else:
            self.sucessos += 1

    def _anexar_erro(self, msg: str) -> None:
        if self._truncado:
            return
        if len(self.erros) < self.limite_erros:
            self.erros.append(msg)
        else:
            self.erros.append(MARCADOR_EXCESSO)
            self._truncado = True

    def fechar(self) -> BatchOutcome:
        return BatchOutcome(success_count=self.sucessos, failure_count=self.falhas, errors=list(self.erros))


def normalizar_registro(
    linha: RawRow, mapping: ColumnMapping, numero: int
) -> ShipmentRecord | RowFailure:
    pedido = (linha.get(mapping.order_header) or "").strip()
    tracking = (linha.get(mapping.tracking_header) or "").strip()
    carrier = (linha.get(mapping.carrier_header) or "").strip() if mapping.carrier_header else ""

    if not pedido or not tracking:
        return RowFailure(kind=RowErrorKind.MISSING_REQUIRED_FIELD, order_identifier=pedido, row_number=numero)

    return ShipmentRecord(order_identifier=pedido, tracking_number=tracking, carrier_name=carrier or None)


def processar_linha(
    gateway: ShopifyGateway, linha: RawRow, mapping: ColumnMapping, numero: int
) -> RowOutcome:
    """pending -> normalized -> resolved -> dispatched; sai cedo na primeira falha."""
    registro = normalizar_registro(linha, mapping, numero)
    if isinstance(registro, RowFailure):
        return registro

    resolvido = resolver_pedido(gateway, registro.order_identifier)
    if isinstance(resolvido, RowFailure):
        return resolvido

    logger.debug(
        "pedido_resolvido",
        extra={
            "row": numero,
            "order": registro.order_identifier,
            "order_id": resolvido.order.id,
            "order_name": resolvido.order.name,
            "fulfillment_order_id": resolvido.fulfillment_order_id,
        },
    )
    return despachar_fulfillment(gateway, resolvido.fulfillment_order_id, registro)


def processar_tracking(
    file_bytes: bytes,
    filename: str,
    gateway: ShopifyGateway,
    *,
    limite_erros: int | None = None,
) -> TrackingImportResponse:
    """
    Executa o lote inteiro e sempre devolve uma resposta estruturada:
      - erro de lote (formato, parse, vazio, colunas) -> status "error", nenhuma chamada remota
      - caso contrário -> status "success" com contadores e log de erros por linha
    As linhas são processadas em sequência, na ordem do arquivo.
    """
    inicio = time.perf_counter()
    logger.info("tracking_import_start", extra={"arquivo": filename, "size": len(file_bytes)})

    try:
        linhas = ler_planilha(file_bytes, filename)
        mapping = inferir_colunas(list(linhas[0].keys()))
    except (DecodeError, SchemaResolutionError) as e:
        logger.warning("tracking_import_rejected", extra={"arquivo": filename, "code": e.code, "error": e.message})
        return TrackingImportResponse.erro(e.message)
    except Exception as e:
        logger.exception("tracking_import_crashed", extra={"arquivo": filename})
        return TrackingImportResponse.erro(f"Server error: {e}")

    try:
        acumulador = AcumuladorLote(limite_erros if limite_erros is not None else settings.TRACKING_MAX_ERROS)
        for numero, linha in enumerate(linhas, start=1):
            resultado = processar_linha(gateway, linha, mapping, numero)
            if isinstance(resultado, RowFailure):
                logger.info(
                    "tracking_row_failed",
                    extra={"row": numero, "kind": resultado.kind.value, "order": resultado.order_identifier},
                )
            acumulador.registrar(resultado)
        outcome = acumulador.fechar()
    except Exception as e:
        logger.exception("tracking_import_crashed", extra={"arquivo": filename})
        return TrackingImportResponse.erro(f"Server error: {e}")

    logger.info(
        "tracking_import_done",
        extra={
            "arquivo": filename,
            "rows": len(linhas),
            "success": outcome.success_count,
            "failed": outcome.failure_count,
            "elapsed_s": round(time.perf_counter() - inicio, 3),
        },
    )
    return TrackingImportResponse.sucesso(outcome)
