#!/usr/bin/env python3
"""
Partner-share chart for Japanese imports of one HS commodity (legacy UN Comtrade API).

Usage (examples):
  # Coffee, written to figures/comtrade_share_0901.svg
  PYTHONPATH=src ./scripts/make_share_chart.py --cmd 0901

  # Custom output, request tracing on
  PYTHONPATH=src ./scripts/make_share_chart.py --cmd 2709 --out crude.svg --debug

Environment:
  COMTRADE_API_BASE (optional)  Defaults to https://comtrade.un.org/api/get
  COMTRADE_TIMEOUT  (optional)  Seconds per request, default 60
  COMTRADE_DEBUG    (optional)  1 = log every request
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

HERE = Path(__file__).resolve()
ROOT = HERE.parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from comtrade_share.chart import ChartContainer  # noqa: E402
from comtrade_share.logging_config import configure_logging  # noqa: E402
from comtrade_share.paths import chart_path, ensure_dirs  # noqa: E402
from comtrade_share.share_chart import add_comtrade_data  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--cmd", default="0901", help="HS commodity code (0901 = coffee)")
    ap.add_argument("--out", default=None, help="SVG path (default figures/comtrade_share_<cmd>.svg)")
    ap.add_argument("--debug", action="store_true", help="Log every request")
    args = ap.parse_args()

    configure_logging("DEBUG" if args.debug else None)

    if args.out:
        out = Path(args.out)
    else:
        ensure_dirs()
        out = chart_path(args.cmd)

    container = ChartContainer(out)
    try:
        records = asyncio.run(add_comtrade_data(args.cmd, container))
    finally:
        container.close()
    print(f"wrote {out} from {len(records):,} records", file=sys.stderr)


if __name__ == "__main__":
    main()
