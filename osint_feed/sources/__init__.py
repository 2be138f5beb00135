"""
News source adapters and the multi-source aggregator.

Sources are registered in a fixed order. That order decides which copy of
a duplicated story survives aggregation.
"""

from .aggregate import Aggregator
from .base import NewsSource
from .currents import CurrentsSource
from .gdelt import GdeltSource
from .gnews import GnewsSource
from .guardian import GuardianSource
from .newsdata import NewsdataSource
from .registry import KNOWN_SOURCES, build_sources
from .rss import RssSource

__all__ = [
    "KNOWN_SOURCES",
    "NewsSource",
    "build_sources",
    "Aggregator",
    "GdeltSource",
    "GuardianSource",
    "CurrentsSource",
    "NewsdataSource",
    "GnewsSource",
    "RssSource",
]
