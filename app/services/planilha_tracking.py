from __future__ import annotations

import io
import warnings
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

import pandas as pd

from app.common.errors import EmptyInput, ParseError, UnsupportedFormat
from app.common.logging_setup import get_logger
from app.schemas.shopify_tracking import RawRow
from app.utils.utils_helpers import limpar

logger = get_logger(__name__)

EXTENSOES_TEXTO: tuple[str, ...] = (".csv", ".txt")
EXTENSOES_PLANILHA: tuple[str, ...] = (".xlsx", ".xls")


def _celula_para_texto(v: Any) -> str:
    # Excel guarda números como float: 1001.0 -> "1001"
    if isinstance(v, bool):
        return str(v).upper()
    if isinstance(v, float) and not pd.isna(v) and v.is_integer():
        return str(int(v))
    if isinstance(v, datetime | date) and not pd.isna(v):
        return v.isoformat()
    return limpar(v)


def _ler_texto(file_bytes: bytes, fname: str) -> pd.DataFrame:
    texto = file_bytes.decode("utf-8-sig")  # remove BOM, se houver
    if not texto.strip():
        raise EmptyInput("No records found in the uploaded file.")

    opcoes: dict[str, Any] = {"sep": ",", "quotechar": '"', "dtype": str, "engine": "python"}
    n_colunas = len(pd.read_csv(io.StringIO(texto), nrows=0, **opcoes).columns)

    # linhas com colunas a mais são cortadas; com colunas a menos, completadas com vazio
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", pd.errors.ParserWarning)
        return pd.read_csv(
            io.StringIO(texto),
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            on_bad_lines=lambda campos: campos[:n_colunas],
            **opcoes,
        )


def _ler_excel(file_bytes: bytes, fname: str) -> pd.DataFrame:
    engine = "xlrd" if fname.endswith(".xls") else "openpyxl"
    # apenas a primeira aba; a primeira linha é o cabeçalho
    return pd.read_excel(io.BytesIO(file_bytes), sheet_name=0, engine=engine, dtype=object)


def _para_linhas(df: pd.DataFrame) -> list[RawRow]:
    colunas = [limpar(c) for c in df.columns]
    linhas: list[RawRow] = []
    for valores in df.itertuples(index=False, name=None):
        linha = {col: _celula_para_texto(v) for col, v in zip(colunas, valores, strict=False)}
        # linha totalmente vazia é ignorada
        if any(linha.values()):
            linhas.append(linha)
    return linhas


def ler_planilha(file_bytes: bytes, filename: str) -> list[RawRow]:
    """
    Converte o arquivo enviado em linhas {cabeçalho: texto}, na ordem do arquivo.
      - .csv/.txt: texto delimitado por vírgula (UTF-8, BOM opcional, linhas irregulares toleradas)
      - .xlsx/.xls: primeira aba
    Levanta UnsupportedFormat, ParseError ou EmptyInput.
    """
    fname = (filename or "").strip().lower()
    leitor: Callable[[bytes, str], pd.DataFrame]
    if fname.endswith(EXTENSOES_TEXTO):
        leitor = _ler_texto
    elif fname.endswith(EXTENSOES_PLANILHA):
        leitor = _ler_excel
    else:
        raise UnsupportedFormat(
            "Unsupported file type. Please upload .csv, .xlsx, .xls, or .txt",
            data={"filename": filename},
        )

    try:
        df = leitor(file_bytes, fname)
    except EmptyInput:
        raise
    except pd.errors.EmptyDataError as e:
        raise EmptyInput("No records found in the uploaded file.", cause=e) from e
    except Exception as e:
        raise ParseError(f"Error parsing file: {e}", cause=e, data={"filename": filename}) from e

    linhas = _para_linhas(df)
    if not linhas:
        raise EmptyInput("No records found in the uploaded file.", data={"filename": filename})

    logger.info("planilha_lida", extra={"arquivo": filename, "rows": len(linhas), "headers": list(linhas[0])})
    return linhas
