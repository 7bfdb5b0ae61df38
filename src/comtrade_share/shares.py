"""
comtrade_share.shares: turn accumulated Comtrade records into per-partner bands

Records are DataFrames with columns period(int YYYY), partnerCode(int),
partnerTitle(str), tradeValue(float). One row per (partnerCode, period) after
``dedupe``.

  period_table  wide frame: index period(Timestamp), one column per partner
                title in first-appearance order, then "Other" (World residual)
  stack_series  (lower, upper) band edges of the stacked table
  rank_partners partner codes worth a full-history pull
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import pandas as pd

from comtrade_share import config
from comtrade_share.comtrade import ComtradeError

log = logging.getLogger(__name__)

_KEY = ["partnerCode", "period"]


# ---------- accumulation ----------


def dedupe(records: pd.DataFrame) -> pd.DataFrame:
    """Keep the first record seen for each (partner, period)."""
    return records.drop_duplicates(subset=_KEY, keep="first").reset_index(drop=True)


def merge(records: pd.DataFrame, new: pd.DataFrame) -> pd.DataFrame:
    return dedupe(pd.concat([records, new], ignore_index=True))


def period_to_date(period) -> pd.Timestamp:
    return pd.to_datetime(str(period), format="%Y")


def get_periods(records: pd.DataFrame) -> List[pd.Timestamp]:
    return [period_to_date(p) for p in sorted(records["period"].unique())]


def partner_titles(records: pd.DataFrame) -> List[str]:
    titles = records.loc[records["partnerCode"] != config.WORLD, "partnerTitle"]
    return list(dict.fromkeys(titles))


# ---------- series ----------


def period_table(records: pd.DataFrame) -> pd.DataFrame:
    periods = pd.DatetimeIndex(get_periods(records), name="period")
    titles = partner_titles(records)

    df = records.assign(period_dt=pd.to_datetime(records["period"].astype(str), format="%Y"))
    is_world = df["partnerCode"] == config.WORLD

    world = df.loc[is_world].groupby("period_dt")["tradeValue"].first()
    partners = df.loc[~is_world]
    if partners.empty:
        wide = pd.DataFrame(index=periods, dtype="float64")
    else:
        wide = (
            partners.groupby(["period_dt", "partnerTitle"], sort=False)["tradeValue"]
            .sum()
            .unstack(fill_value=0.0)
            .reindex(index=periods, columns=titles, fill_value=0.0)
            .fillna(0.0)
        )
    wide.index.name = "period"
    wide.columns.name = None

    missing = periods.difference(world.index)
    if len(missing):
        log.warning(
            "no World record for %s; skipping",
            ", ".join(p.strftime("%Y") for p in missing),
        )
        wide = wide.drop(index=missing)

    partner_sum = wide.sum(axis=1)
    other = world.reindex(wide.index) - partner_sum
    for period in other.index[(other < 0).to_numpy()]:
        log.warning(
            "world trade too small? %s: partners %s > world %s",
            period.strftime("%Y"),
            partner_sum[period],
            world[period],
        )

    wide[config.OTHER] = other
    return wide


def stack_series(table: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Stack columns left to right from zero, in the table's own column order."""
    upper = table.cumsum(axis=1)
    lower = upper - table
    return lower, upper


# ---------- partner discovery ----------


def rank_partners(latest: pd.DataFrame, divisor: int = config.SHARE_DIVISOR) -> List[int]:
    """Partners holding at least 1/``divisor`` of World trade, in response order."""
    world = latest.loc[latest["partnerCode"] == config.WORLD, "tradeValue"]
    if world.empty:
        raise ComtradeError("no World record in the latest period; cannot rank partners")
    world_trade = world.iloc[0]

    keep = (latest["tradeValue"] >= world_trade / divisor) & (latest["partnerCode"] != config.WORLD)
    return [int(c) for c in latest.loc[keep, "partnerCode"]]


def next_batch(queue: Sequence[int], size: int = config.BATCH_SIZE) -> Tuple[List[int], List[int]]:
    """Pop up to ``size`` partners off the tail of ``queue``."""
    queue = list(queue)
    return queue[-size:], queue[:-size]
