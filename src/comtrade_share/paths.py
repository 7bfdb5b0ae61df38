from __future__ import annotations

from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
SRC_DIR = REPO_ROOT / "src"
FIGURES = REPO_ROOT / "figures"


def ensure_dirs() -> None:
    FIGURES.mkdir(parents=True, exist_ok=True)


def chart_path(hs_code: str) -> Path:
    return FIGURES / f"comtrade_share_{hs_code}.svg"
