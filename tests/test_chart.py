import matplotlib.dates as mdates
import matplotlib.ticker as mtick
import numpy as np
import pandas as pd
import pytest

from comtrade_share import chart as C
from comtrade_share import config
from comtrade_share.comtrade import ComtradeError


def frame(rows):
    return pd.DataFrame(rows, columns=["partnerCode", "partnerTitle", "period", "tradeValue"])


@pytest.fixture
def records():
    return frame(
        [
            (0, "World", 2018, 800.0),
            (0, "World", 2019, 900.0),
            (0, "World", 2020, 1000.0),
            (124, "Canada", 2019, 50.0),
            (124, "Canada", 2020, 60.0),
        ]
    )


@pytest.fixture
def container():
    c = C.ChartContainer()
    yield c
    c.close()


def geometry(chart):
    return {k: band.get_paths()[0].vertices.copy() for k, band in chart.bands.items()}


@pytest.mark.parametrize(
    "value,label",
    [(0, "$0"), (250, "$250"), (40_000, "$40k"), (1_500_000, "$1.5M"), (2e9, "$2G"), (123_456, "$120k")],
)
def test_currency_si(value, label):
    assert C.currency_si(value) == label


def test_smooth_basis_clamps_ends_and_keeps_x_order():
    x = np.array([0.0, 1.0, 2.0, 3.0])
    y = np.array([0.0, 4.0, 1.0, 3.0])
    xs, ys = C.smooth_basis(x, y, samples=8)

    assert len(xs) == (len(x) + 1) * 8 + 1
    assert (xs[0], ys[0]) == (0.0, 0.0)
    assert (xs[-1], ys[-1]) == (3.0, 3.0)
    assert np.all(np.diff(xs) >= 0)
    assert ys.max() < 4.0


def test_smooth_basis_single_point():
    xs, ys = C.smooth_basis([5.0], [2.0])
    assert xs.tolist() == [5.0]
    assert ys.tolist() == [2.0]


def test_band_color_rules():
    assert C.band_color("Canada", 0) == config.HIGHLIGHT_COLOR
    assert C.band_color("Other", 3) == config.OTHER_COLOR
    assert C.band_color("Brazil", 1) == C.PALETTE[1]
    assert C.band_color("Brazil", len(C.PALETTE) + 1) == C.PALETTE[1]


def test_setup_chart_domains(container, records):
    chart = C.setup_chart(container, records)

    assert chart.x_domain == (mdates.datestr2num("2018-01-01"), mdates.datestr2num("2020-01-01"))
    assert chart.y_domain == (0.0, 1000.0)
    assert chart.ax.get_ylim() == (0.0, 1000.0)


def test_setup_chart_ticks(container, records):
    chart = C.setup_chart(container, records)

    lo, hi = chart.x_domain
    xfmt = chart.ax.xaxis.get_major_formatter()
    assert [xfmt(t) for t in chart.ax.get_xticks() if lo <= t <= hi] == ["2018", "2019", "2020"]

    yticks = [t for t in chart.ax.get_yticks() if 0.0 <= t <= 1000.0]
    assert isinstance(chart.ax.yaxis.get_major_locator(), mtick.MaxNLocator)
    assert len(yticks) <= 6
    yfmt = chart.ax.yaxis.get_major_formatter()
    assert yfmt(1000.0) == "$1k"
    assert yfmt(0.0) == "$0"


def test_setup_chart_single_period_pads_year_axis(container, caplog):
    records = frame([(0, "World", 2020, 500.0), (124, "Canada", 2020, 40.0)])
    with caplog.at_level("INFO", logger="comtrade_share.chart"):
        chart = C.setup_chart(container, records)

    mid = mdates.datestr2num("2020-01-01")
    assert chart.x_domain == (mid - C.HALF_YEAR, mid + C.HALF_YEAR)
    assert chart.ax.get_xlim() == chart.x_domain
    assert "padding the year axis" in caplog.text


def test_setup_chart_requires_world(container):
    with pytest.raises(ComtradeError):
        C.setup_chart(container, frame([(124, "Canada", 2020, 1.0)]))


def test_render_is_idempotent(container, records):
    chart = C.setup_chart(container, records)
    C.render(chart, records)
    first = geometry(chart)
    C.render(chart, records)
    second = geometry(chart)

    assert list(first) == ["Canada", "Other"]
    assert list(second) == list(first)
    for key in first:
        np.testing.assert_array_equal(first[key], second[key])
    assert len(chart.ax.collections) == 2


def test_render_joins_bands_by_key(container, records):
    chart = C.setup_chart(container, records)
    C.render(chart, records)
    canada = chart.bands["Canada"]

    more = pd.concat([records, frame([(76, "Brazil", 2020, 100.0)])], ignore_index=True)
    C.render(chart, more)
    assert list(chart.bands) == ["Canada", "Other", "Brazil"]
    assert chart.bands["Canada"] is canada

    C.render(chart, records)
    assert "Brazil" not in chart.bands
    assert len(chart.ax.collections) == 2


def test_band_colors_stable_as_partners_arrive(container, records):
    chart = C.setup_chart(container, records)
    with_brazil = pd.concat([records, frame([(76, "Brazil", 2020, 100.0)])], ignore_index=True)
    C.render(chart, with_brazil)
    before = {k: tuple(band.get_facecolor()[0]) for k, band in chart.bands.items()}

    with_colombia = pd.concat([with_brazil, frame([(170, "Colombia", 2020, 80.0)])], ignore_index=True)
    C.render(chart, with_colombia)
    after = {k: tuple(band.get_facecolor()[0]) for k, band in chart.bands.items()}

    for key in ("Canada", "Brazil", "Other"):
        assert after[key] == before[key]
    assert after["Colombia"] != after["Brazil"]


def test_render_band_fill(container, records):
    chart = C.setup_chart(container, records)
    C.render(chart, records)
    assert tuple(chart.bands["Canada"].get_facecolor()[0][:3]) == (1.0, 0.0, 0.0)


def test_bands_stack_to_world(container, records):
    chart = C.setup_chart(container, records)
    C.render(chart, records)
    top = chart.bands["Other"].get_paths()[0].vertices
    assert top[:, 1].max() == pytest.approx(1000.0)


def test_container_loading_and_svg(tmp_path, records):
    out = tmp_path / "share.svg"
    container = C.ChartContainer(out)
    try:
        container.show_loading()
        assert container.loading
        assert [t.get_text() for t in container.fig.texts] == ["Loading..."]
        chart = C.setup_chart(container, records)
        C.render(chart, records)
        assert out.exists()

        container.hide_loading()
        assert not container.loading
        assert len(container.fig.texts) == 0
        svg = out.read_text()
        assert 'id="band-Canada"' in svg
        assert "<title>Canada</title>" in svg
        assert "<title>Other</title>" in svg
    finally:
        container.close()
