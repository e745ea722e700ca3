# ABOUTME: Video metadata provider using the YouTube oEmbed endpoint.
# ABOUTME: Maps the video title and channel name to a `video` Record.

from urllib.parse import urlsplit

from bibresolve.metadata.errors import InvalidKeyError
from bibresolve.metadata.provider import BaseProvider, Lookup, as_dict, as_str
from bibresolve.metadata.types import Author, Record

_OEMBED_URL = "https://www.youtube.com/oembed"

VIDEO_HOSTS = frozenset({"youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be"})


def is_video_url(url: str) -> bool:
    """True when the URL points at a host the oEmbed adapter handles."""
    try:
        host = (urlsplit(url.strip()).hostname or "").lower()
    except ValueError:
        return False
    return host in VIDEO_HOSTS


class YouTubeProvider(BaseProvider):
    """URL lookup for YouTube videos via oEmbed."""

    name = "youtube"
    source_label = "YouTube"
    capabilities = frozenset({Lookup.URL})

    def lookup_by_url(self, url: str) -> Record:
        page_url = self._require_key(url, "URL")
        parts = urlsplit(page_url)
        if not parts.scheme or not parts.netloc:
            raise InvalidKeyError(f"{self.name}: invalid video URL: {page_url}")

        data = as_dict(
            self._decode_json(self._get(_OEMBED_URL, params={"format": "json", "url": page_url}))
        )
        title = as_str(data.get("title")) or page_url
        channel = as_str(data.get("author_name"))

        record = Record(id="", type="video", title=title)
        # A channel is a corporate author: family name only.
        if channel:
            record.authors = [Author(family=channel)]
        record.container_title = "YouTube"
        record.publisher = "YouTube"
        record.set_url(page_url)
        record.annotation.keywords = ["video"]
        if channel:
            summary = f"YouTube video: {title} by {channel}."
        else:
            summary = f"YouTube video: {title}."
        return self._finish(record, summary)
