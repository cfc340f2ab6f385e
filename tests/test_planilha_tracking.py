from __future__ import annotations

import io
from typing import Any

import pandas as pd
import pytest
from conftest import make_xlsx

from app.common.errors import DecodeError, EmptyInput, ParseError, UnsupportedFormat
from app.services import planilha_tracking
from app.services.planilha_tracking import ler_planilha

CSV_BASICO = b"Order Name,Tracking Number,Tracking Company\n#1001,TRACK1,FedEx\n#1002,TRACK2,\n"


def test_csv_rows_keep_file_order() -> None:
    linhas = ler_planilha(CSV_BASICO, "pedidos.csv")

    assert linhas == [
        {"Order Name": "#1001", "Tracking Number": "TRACK1", "Tracking Company": "FedEx"},
        {"Order Name": "#1002", "Tracking Number": "TRACK2", "Tracking Company": ""},
    ]
    assert list(linhas[0]) == ["Order Name", "Tracking Number", "Tracking Company"]


def test_bom_does_not_change_headers() -> None:
    sem_bom = ler_planilha(CSV_BASICO, "a.csv")
    com_bom = ler_planilha(b"\xef\xbb\xbf" + CSV_BASICO, "a.csv")

    assert com_bom == sem_bom
    assert list(com_bom[0])[0] == "Order Name"


def test_fields_and_headers_are_trimmed() -> None:
    linhas = ler_planilha(b" Order Name , Tracking Number \n  #1001 ,  TRACK1  \n", "x.txt")

    assert linhas == [{"Order Name": "#1001", "Tracking Number": "TRACK1"}]


def test_ragged_rows_are_tolerated() -> None:
    conteudo = b"Order,Tracking,Carrier\n#1,T1\n#2,T2,UPS,extra\n"

    linhas = ler_planilha(conteudo, "x.csv")

    assert linhas[0] == {"Order": "#1", "Tracking": "T1", "Carrier": ""}
    assert linhas[1] == {"Order": "#2", "Tracking": "T2", "Carrier": "UPS"}


def test_blank_lines_are_skipped() -> None:
    linhas = ler_planilha(b"Order,Tracking\n\n#1,T1\n\n\n#2,T2\n", "x.csv")

    assert [linha["Order"] for linha in linhas] == ["#1", "#2"]


def test_uppercase_suffix_is_accepted() -> None:
    assert len(ler_planilha(CSV_BASICO, "PEDIDOS.CSV")) == 2


@pytest.mark.parametrize("nome", ["pedidos.pdf", "pedidos.json", "pedidos", ""])
def test_unsupported_suffix(nome: str) -> None:
    with pytest.raises(UnsupportedFormat, match="Unsupported file type"):
        ler_planilha(CSV_BASICO, nome)


def test_empty_file_is_empty_input() -> None:
    with pytest.raises(EmptyInput, match="No records found"):
        ler_planilha(b"", "vazio.csv")


def test_header_only_is_empty_input() -> None:
    with pytest.raises(EmptyInput):
        ler_planilha(b"Order Name,Tracking Number\n", "so_cabecalho.csv")


def test_invalid_utf8_is_parse_error() -> None:
    with pytest.raises(ParseError, match="Error parsing file") as exc:
        ler_planilha(b"Order,Tracking\n\xff\xfe\xfa,T1\n", "x.csv")

    assert isinstance(exc.value.cause, UnicodeDecodeError)
    assert isinstance(exc.value, DecodeError)


def test_xlsx_single_sheet() -> None:
    conteudo = make_xlsx(
        [
            {"OrderID": 1001, "Tracking#": "TRACK1"},
            {"OrderID": 1002, "Tracking#": None},
        ]
    )

    linhas = ler_planilha(conteudo, "pedidos.xlsx")

    assert linhas == [
        {"OrderID": "1001", "Tracking#": "TRACK1"},
        {"OrderID": "1002", "Tracking#": ""},
    ]


def test_xlsx_integral_floats_lose_decimal_suffix() -> None:
    conteudo = make_xlsx([{"Order": 1001.0, "Tracking": 123456789.0}])

    assert ler_planilha(conteudo, "p.xlsx") == [{"Order": "1001", "Tracking": "123456789"}]


def test_corrupt_spreadsheet_is_parse_error() -> None:
    with pytest.raises(ParseError):
        ler_planilha(b"isto nao e um xlsx", "quebrado.xlsx")


def test_empty_spreadsheet_is_empty_input() -> None:
    conteudo = make_xlsx([], columns=["Order", "Tracking"])

    with pytest.raises(EmptyInput):
        ler_planilha(conteudo, "vazio.xlsx")


def test_only_first_sheet_is_read() -> None:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame([{"Order": "#1", "Tracking": "T1"}]).to_excel(writer, sheet_name="Envios", index=False)
        pd.DataFrame([{"Order": "#2", "Tracking": "T2"}, {"Order": "#3", "Tracking": "T3"}]).to_excel(
            writer, sheet_name="Arquivo", index=False
        )

    linhas = ler_planilha(buf.getvalue(), "duas_abas.xlsx")

    assert linhas == [{"Order": "#1", "Tracking": "T1"}]


def test_xls_uses_xlrd_engine(monkeypatch: pytest.MonkeyPatch) -> None:
    chamadas: list[dict[str, Any]] = []

    def fake_read_excel(buf: io.BytesIO, **kwargs: Any) -> pd.DataFrame:
        chamadas.append(kwargs)
        return pd.DataFrame([{"Order": "#1", "Tracking": "T1"}])

    monkeypatch.setattr(planilha_tracking.pd, "read_excel", fake_read_excel)

    assert ler_planilha(b"conteudo", "antigo.XLS") == [{"Order": "#1", "Tracking": "T1"}]
    assert chamadas[0]["engine"] == "xlrd"
    assert chamadas[0]["sheet_name"] == 0


def test_corrupt_xls_is_parse_error() -> None:
    with pytest.raises(ParseError, match="Error parsing file"):
        ler_planilha(b"isto nao e um xls", "quebrado.xls")
