from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from starlette.concurrency import run_in_threadpool

from app.common.errors import RemoteError
from app.common.settings import settings
from app.schemas.shopify_tracking import TrackingImportResponse
from app.services.importar_tracking import processar_tracking
from app.services.shopify_client import ShopifyGraphQLClient
from app.services.shopify_gateway import ShopifyGateway
from app.services.tracking_amostra import gerar_csv_amostra

router = APIRouter(prefix="/shopify/tracking", tags=["Rastreios"])


def get_shopify_gateway() -> ShopifyGateway:
    """Sessão Shopify já autenticada (token da configuração); sobrescrita nos testes."""
    if not settings.SHOP_URL or not settings.SHOPIFY_TOKEN:
        raise HTTPException(status_code=503, detail="Shopify store is not configured")
    return ShopifyGraphQLClient.from_settings()


@router.post(
    "/importar",
    response_model=TrackingImportResponse,
    response_model_exclude_none=True,
    summary="Importar rastreios em lote",
    description=(
        "Recebe um arquivo .csv/.txt/.xlsx/.xls via multipart/form-data com colunas de pedido "
        "(ex.: `Order Name`) e rastreio (ex.: `Tracking Number`), e cria um fulfillment por linha."
    ),
)
async def importar_rastreios(
    file: UploadFile | None = File(None, description="Planilha com pedidos e rastreios"),
    gateway: ShopifyGateway = Depends(get_shopify_gateway),
) -> TrackingImportResponse:
    if file is None or not file.filename:
        raise HTTPException(
            status_code=400,
            detail="No file uploaded. Please select a valid CSV, Excel, or TXT file.",
        )

    limite = settings.TRACKING_MAX_UPLOAD_BYTES
    conteudo = await file.read(limite + 1)
    if len(conteudo) > limite:
        raise HTTPException(status_code=413, detail=f"File too large (max {limite // (1024 * 1024)} MB)")

    # o lote faz chamadas bloqueantes (requests): roda fora do event loop
    return await run_in_threadpool(processar_tracking, conteudo, file.filename, gateway)


@router.get("/amostra", summary="Baixar arquivo de exemplo")
def baixar_amostra(gateway: ShopifyGateway = Depends(get_shopify_gateway)) -> Response:
    try:
        csv_content = gerar_csv_amostra(gateway)
    except RemoteError:
        # mensagem curta + 502
        raise HTTPException(status_code=502, detail="Could not load orders from Shopify")
    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="sample_orders.csv"'},
    )
