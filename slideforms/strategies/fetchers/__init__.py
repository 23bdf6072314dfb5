"""Concrete fetcher implementations."""

from slideforms.strategies.fetchers.http import HttpFetcher

__all__ = [
    "HttpFetcher",
]
