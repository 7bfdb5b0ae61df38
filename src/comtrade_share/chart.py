# src/comtrade_share/chart.py
from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import matplotlib.ticker as mtick
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.collections import PolyCollection

from comtrade_share import config
from comtrade_share.comtrade import ComtradeError
from comtrade_share.shares import get_periods, period_table, stack_series

__all__ = [
    "ChartContainer",
    "ChartState",
    "band_color",
    "currency_si",
    "render",
    "setup_chart",
    "smooth_basis",
]

log = logging.getLogger(__name__)

PALETTE = sns.color_palette(config.PALETTE).as_hex()

# uniform cubic B-spline basis, rows weight P0..P3 for t^3, t^2, t, 1
_BSPLINE = np.array(
    [
        [-1.0, 3.0, -3.0, 1.0],
        [3.0, -6.0, 3.0, 0.0],
        [-3.0, 0.0, 3.0, 0.0],
        [1.0, 4.0, 1.0, 0.0],
    ]
)

_SI = ((1e12, "T"), (1e9, "G"), (1e6, "M"), (1e3, "k"))

_SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", _SVG_NS)
ET.register_namespace("xlink", "http://www.w3.org/1999/xlink")
ET.register_namespace("rdf", "http://www.w3.org/1999/02/22-rdf-syntax-ns#")
ET.register_namespace("dc", "http://purl.org/dc/elements/1.1/")
ET.register_namespace("cc", "http://creativecommons.org/ns#")

_BAND_PREFIX = "band-"
HALF_YEAR = 182.5  # days, x padding when only one period is known


def _add_band_titles(root: ET.Element) -> None:
    """Give each band group a <title> with its partner name (hover text)."""
    for g in root.iter(f"{{{_SVG_NS}}}g"):
        gid = g.get("id", "")
        if gid.startswith(_BAND_PREFIX):
            title = ET.Element(f"{{{_SVG_NS}}}title")
            title.text = gid[len(_BAND_PREFIX) :]
            g.insert(0, title)


class ChartContainer:
    """Fixed-size drawing target; writes an SVG to ``path`` on every flush."""

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        width: int = config.WIDTH,
        height: int = config.HEIGHT,
        dpi: int = config.DPI,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.width = width
        self.height = height
        self.fig = plt.figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self._loading = None

    @property
    def loading(self) -> bool:
        return self._loading is not None

    def clear(self) -> None:
        self.fig.clf()
        self._loading = None

    def show_loading(self) -> None:
        if self._loading is None:
            self._loading = self.fig.text(0.5, 0.5, "Loading...", ha="center", va="center")

    def hide_loading(self) -> None:
        if self._loading is not None:
            self._loading.remove()
            self._loading = None
        self.flush()

    def flush(self) -> None:
        if self.path is None:
            return
        buf = io.BytesIO()
        self.fig.savefig(buf, format="svg")
        tree = ET.ElementTree(ET.fromstring(buf.getvalue()))
        _add_band_titles(tree.getroot())
        tree.write(self.path, encoding="utf-8", xml_declaration=True)
        log.debug("wrote %s", self.path)

    def close(self) -> None:
        plt.close(self.fig)


@dataclass
class ChartState:
    container: ChartContainer
    ax: plt.Axes
    x_domain: Tuple[float, float]
    y_domain: Tuple[float, float]
    highlight: str = config.CANADA_TITLE
    bands: Dict[str, PolyCollection] = field(default_factory=dict)


def currency_si(value, pos=None) -> str:
    """Two significant digits with an SI suffix, e.g. ``$1.5M``."""
    for scale, suffix in _SI:
        if abs(value) >= scale:
            return f"${float(f'{value / scale:.2g}'):g}{suffix}"
    return f"${float(f'{value:.2g}'):g}"


def _axes_rect(container: ChartContainer) -> Tuple[float, float, float, float]:
    m = config.MARGIN
    left = m["left"] / container.width
    bottom = m["bottom"] / container.height
    width = (container.width - m["left"] - m["right"]) / container.width
    height = (container.height - m["top"] - m["bottom"]) / container.height
    return left, bottom, width, height


def setup_chart(
    container: ChartContainer,
    records: pd.DataFrame,
    highlight: str = config.CANADA_TITLE,
) -> ChartState:
    """Create the axes once; domains come from ``records`` and are not revisited."""
    world = records.loc[records["partnerCode"] == config.WORLD, "tradeValue"]
    if world.empty:
        raise ComtradeError("no World records to size the value axis")

    periods = get_periods(records)
    x_domain = (mdates.date2num(periods[0]), mdates.date2num(periods[-1]))
    if x_domain[0] == x_domain[1]:
        log.info("only %s on record; padding the year axis", periods[0].year)
        x_domain = (x_domain[0] - HALF_YEAR, x_domain[1] + HALF_YEAR)
    y_domain = (0.0, float(world.max()))

    ax = container.fig.add_axes(_axes_rect(container))
    ax.set_xlim(*x_domain)
    ax.set_ylim(*y_domain)
    ax.autoscale(enable=False)

    ax.xaxis.set_major_locator(mdates.YearLocator())
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y"))
    ax.yaxis.set_major_locator(mtick.MaxNLocator(5))
    ax.yaxis.set_major_formatter(mtick.FuncFormatter(currency_si))
    ax.tick_params(labelsize=7)
    for side in ("top", "right"):
        ax.spines[side].set_visible(False)

    return ChartState(container, ax, x_domain, y_domain, highlight=highlight)


def smooth_basis(x, y, samples: int = config.SMOOTH_SAMPLES) -> Tuple[np.ndarray, np.ndarray]:
    """B-spline through (x, y) with ends clamped to the first and last point."""
    pts = np.column_stack([np.asarray(x, dtype=float), np.asarray(y, dtype=float)])
    if len(pts) < 2:
        return pts[:, 0], pts[:, 1]

    ctrl = np.vstack([pts[:1], pts[:1], pts, pts[-1:], pts[-1:]])
    t = np.linspace(0.0, 1.0, samples, endpoint=False)
    weights = np.column_stack([t**3, t**2, t, np.ones_like(t)]) @ _BSPLINE / 6.0

    segs = [weights @ ctrl[i : i + 4] for i in range(len(ctrl) - 3)]
    curve = np.vstack(segs + [pts[-1:]])
    return curve[:, 0], curve[:, 1]


def band_color(key: str, index: int, highlight: str = config.CANADA_TITLE) -> str:
    if key == highlight:
        return config.HIGHLIGHT_COLOR
    if key == config.OTHER:
        return config.OTHER_COLOR
    return PALETTE[index % len(PALETTE)]


def _band_verts(x: np.ndarray, lower: pd.Series, upper: pd.Series) -> np.ndarray:
    xs, y0 = smooth_basis(x, lower.to_numpy())
    _, y1 = smooth_basis(x, upper.to_numpy())
    return np.column_stack([np.concatenate([xs, xs[::-1]]), np.concatenate([y1, y0[::-1]])])


def render(chart: ChartState, records: pd.DataFrame) -> ChartState:
    """Draw one band per partner (plus Other), joined to existing bands by key."""
    table = period_table(records)
    lower, upper = stack_series(table)
    x = mdates.date2num(table.index.to_pydatetime())
    keys = list(table.columns)

    for i, key in enumerate(keys):
        verts = _band_verts(x, lower[key], upper[key])
        band = chart.bands.get(key)
        if band is None:
            band = PolyCollection([verts], edgecolor="white", linewidth=0.5, label=key)
            band.set_gid(f"{_BAND_PREFIX}{key}")
            chart.ax.add_collection(band, autolim=False)
            chart.bands[key] = band
        else:
            band.set_verts([verts])
        band.set_facecolor(band_color(key, i, chart.highlight))

    for key in [k for k in chart.bands if k not in keys]:
        chart.bands.pop(key).remove()

    log.debug("rendered %d bands over %d periods", len(keys), len(table))
    chart.container.flush()
    return chart
