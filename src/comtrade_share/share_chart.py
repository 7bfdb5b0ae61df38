# src/comtrade_share/share_chart.py
from __future__ import annotations

import logging
from typing import Optional

import pandas as pd
import requests

from comtrade_share import config, paths
from comtrade_share.chart import ChartContainer, render, setup_chart
from comtrade_share.comtrade import fetch
from comtrade_share.shares import dedupe, get_periods, merge, next_batch, rank_partners

__all__ = ["add_comtrade_data"]

log = logging.getLogger(__name__)


async def add_comtrade_data(
    hs_code: str,
    container: Optional[ChartContainer] = None,
    session: Optional[requests.Session] = None,
) -> pd.DataFrame:
    """
    Chart each major partner's share of Japan's imports of ``hs_code``.

    Draws World + Canada first, then ranks every partner on the latest year and
    pulls the full history of those at or above the share threshold, five at a
    time, redrawing after each batch. Returns the accumulated records.

    Without a ``container`` the chart goes to ``figures/comtrade_share_<hs_code>.svg``
    and the figure is closed on return.
    """
    owned = container is None
    if owned:
        paths.ensure_dirs()
        container = ChartContainer(paths.chart_path(hs_code))
    try:
        return await _draw(hs_code, container, session)
    finally:
        if owned:
            container.close()


async def _draw(hs_code: str, container: ChartContainer, session: Optional[requests.Session]) -> pd.DataFrame:
    container.clear()
    container.show_loading()

    records = dedupe(await fetch(hs_code, [config.WORLD, config.CANADA], config.ALL, session=session))
    periods = get_periods(records)

    chart = setup_chart(container, records, highlight=config.CANADA_TITLE)
    render(chart, records)

    latest = await fetch(hs_code, config.ALL, [periods[-1].strftime("%Y")], session=session)
    queue = rank_partners(latest)
    log.info("%s: %d partners at or above 1/%d in %s", hs_code, len(queue), config.SHARE_DIVISOR, periods[-1].year)

    while queue:
        batch, queue = next_batch(queue)
        new = await fetch(hs_code, batch, config.ALL, session=session)
        records = merge(records, new)
        render(chart, records)
        log.info("backfilled %s (%d left)", ",".join(map(str, batch)), len(queue))

    container.hide_loading()
    return records
