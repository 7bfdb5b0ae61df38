"""Partner shares of Japanese imports for one HS commodity, from UN Comtrade."""

from comtrade_share.comtrade import ComtradeError, fetch, fetch_records
from comtrade_share.share_chart import add_comtrade_data

__all__ = ["ComtradeError", "add_comtrade_data", "fetch", "fetch_records"]
