# src/comtrade_share/comtrade.py
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Union

import pandas as pd
import requests

from comtrade_share import config

__all__ = ["ComtradeError", "build_params", "fetch", "fetch_records"]

log = logging.getLogger(__name__)

_STD_COLS = (
    "period",
    "partnerCode",
    "partnerTitle",
    "tradeValue",
)

Selection = Union[str, Iterable[Union[int, str]]]


class ComtradeError(RuntimeError):
    """The API answered, but not with a usable dataset."""


def _join(selection: Selection) -> str:
    if isinstance(selection, str):
        return selection
    return ",".join(str(s) for s in selection)


def build_params(hs_code: str, partners: Selection, periods: Selection) -> dict:
    # https://comtrade.un.org/Data/Doc/API
    return {
        "r": config.REPORTER,
        "rg": config.TRADE_FLOW,
        "p": _join(partners),
        "freq": config.FREQ,
        "ps": _join(periods),
        "px": config.CLASSIFICATION,
        "cc": hs_code,
    }


def _json_or_raise(resp: requests.Response) -> dict:
    ctype = (resp.headers.get("Content-Type") or "").lower()
    if "json" not in ctype:
        preview = resp.text[:300].replace("\n", " ")
        raise ComtradeError(f"Non-JSON response (status {resp.status_code}): {preview}")
    return resp.json()


def _http_get(url: str, params: dict, session: Optional[requests.Session] = None) -> dict:
    http = session if session is not None else requests
    log.debug("GET %s PARAMS: %s", url, params)

    r = http.get(url, params=params, headers={"Accept": "application/json"}, timeout=config.TIMEOUT)
    log.debug("STATUS: %s", r.status_code)

    r.raise_for_status()
    j = _json_or_raise(r)
    if not isinstance(j, dict):
        raise ComtradeError(f"Unexpected payload type {type(j).__name__}")
    return j


def _to_df(payload: dict) -> pd.DataFrame:
    rows = payload.get("dataset")
    if not isinstance(rows, list):
        raise ComtradeError("Response has no 'dataset' list")
    if not rows:
        return pd.DataFrame({c: pd.Series(dtype=t) for c, t in zip(_STD_COLS, ("int64", "int64", "object", "float64"))})

    df = pd.DataFrame(rows)

    # Normalize Columns
    ren = {
        "ptCode": "partnerCode",
        "ptTitle": "partnerTitle",
        "TradeValue": "tradeValue",
    }
    df.rename(columns=ren, inplace=True)

    missing = [c for c in _STD_COLS if c not in df.columns]
    if missing:
        raise ComtradeError(f"Dataset rows lack fields: {', '.join(missing)}")

    df = df.loc[:, list(_STD_COLS)].copy()
    df["period"] = df["period"].astype("int64")
    df["partnerCode"] = df["partnerCode"].astype("int64")
    df["tradeValue"] = pd.to_numeric(df["tradeValue"]).astype("float64")
    return df


def fetch_records(
    hs_code: str,
    partners: Selection,
    periods: Selection,
    session: Optional[requests.Session] = None,
) -> pd.DataFrame:
    """Import records for ``hs_code`` into Japan from ``partners`` over ``periods``.

    ``partners`` and ``periods`` are either ``"all"`` or a collection of codes/years.
    """
    params = build_params(hs_code, partners, periods)
    df = _to_df(_http_get(config.API_BASE, params, session=session))
    log.info("cc=%s p=%s ps=%s: %d records", hs_code, params["p"], params["ps"], len(df))
    return df


async def fetch(
    hs_code: str,
    partners: Selection,
    periods: Selection,
    session: Optional[requests.Session] = None,
) -> pd.DataFrame:
    return await asyncio.to_thread(fetch_records, hs_code, partners, periods, session)
