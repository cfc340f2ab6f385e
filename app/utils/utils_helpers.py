from __future__ import annotations

from typing import Any

import pandas as pd


def limpar(v: Any) -> str:
    """Texto aparado; NaN/None viram ""."""
    if v is None:
        return ""
    try:
        if pd.isna(v):
            return ""
    except (TypeError, ValueError):
        pass
    return str(v).strip()


def normalizar_order_id(valor: str | int) -> str:
    """'gid://shopify/Order/123' -> '123'; demais valores apenas aparados."""
    if isinstance(valor, int):
        return str(valor)
    s = str(valor).strip()
    return s.split("/")[-1] if "gid://" in s and "/" in s else s
