"""
The authenticated, paginated, retrying fetch-and-normalize pipeline.
"""

from dctrack.pipeline.abstract import Authenticator, FetchedPage, PageSource
from dctrack.pipeline.auth import AuthSession
from dctrack.pipeline.envelope import Page, decode_envelope
from dctrack.pipeline.fetcher import PageFetcher
from dctrack.pipeline.mapper import RawValue, RecordMapper
from dctrack.pipeline.paginator import Paginator, next_page

__all__ = [
    "AuthSession",
    "Authenticator",
    "FetchedPage",
    "Page",
    "PageFetcher",
    "PageSource",
    "Paginator",
    "RawValue",
    "RecordMapper",
    "decode_envelope",
    "next_page",
]
