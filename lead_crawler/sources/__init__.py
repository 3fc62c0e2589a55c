"""Discovery sources for public search, maps, video, and social pages."""

from .base import SearchSource, SourceProtocol, clean_title  # noqa: F401
from .maps import MapsListingSource  # noqa: F401
from .social_bio import SocialBioSource  # noqa: F401
from .video import VideoChannelSource  # noqa: F401
from .web_search import BingSearchSource, GoogleSearchSource  # noqa: F401

__all__ = [
    "SearchSource",
    "SourceProtocol",
    "clean_title",
    "GoogleSearchSource",
    "BingSearchSource",
    "MapsListingSource",
    "VideoChannelSource",
    "SocialBioSource",
]
