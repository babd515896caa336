"""Video discovery: YouTube Data API, channel RSS feeds, oEmbed lookups.

Providers share one contract, ``fetch(request) -> list[VideoDescriptor]``,
and ``fetch_videos`` walks them in order until one produces results.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

import requests

from vidnote.errors import QuotaExceededError, SourceUnavailableError

logger = logging.getLogger(__name__)

YOUTUBE_API_URL = "https://www.googleapis.com/youtube/v3"
YOUTUBE_FEED_URL = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"
YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
THUMBNAIL_URL = "https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"

_REQUEST_TIMEOUT = 15

_VIDEO_ID_RE = re.compile(
    r"(?:youtu\.be/|youtube\.com/(?:embed/|v/|shorts/|watch\?v=|watch\?.+&v=))([^\"&?/\s]{11})"
)
_BARE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

_ATOM = "{http://www.w3.org/2005/Atom}"
_YT = "{http://www.youtube.com/xml/schemas/2015}"
_MEDIA = "{http://search.yahoo.com/mrss/}"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class VideoSource(str, Enum):
    YOUTUBE = "youtube"
    RSS = "rss"
    OEMBED = "oembed"


@dataclass(frozen=True)
class VideoDescriptor:
    id: str
    title: str
    url: str = ""
    thumbnail: str = ""
    source: VideoSource = VideoSource.YOUTUBE
    published_at: datetime | None = None

    @property
    def watch_url(self) -> str:
        return WATCH_URL.format(video_id=self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "thumbnail": self.thumbnail,
            "source": self.source.value,
            "published_at": self.published_at.isoformat() if self.published_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VideoDescriptor:
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            thumbnail=str(data.get("thumbnail") or ""),
            source=VideoSource(data.get("source") or VideoSource.YOUTUBE.value),
            published_at=_parse_time(data.get("published_at")),
        )


@dataclass
class VideoRequest:
    """What to look up: channels, explicit video ids, feed URLs, or one URL."""

    channel_ids: list[str] = field(default_factory=list)
    video_ids: list[str] = field(default_factory=list)
    feed_urls: list[str] = field(default_factory=list)
    url: str | None = None


class VideoProvider(Protocol):
    name: str

    def fetch(self, request: VideoRequest) -> list[VideoDescriptor]: ...


def parse_video_id(value: str) -> str | None:
    """Extract the 11-character YouTube id from a URL or a bare id."""
    value = (value or "").strip()
    if _BARE_ID_RE.match(value):
        return value
    match = _VIDEO_ID_RE.search(value)
    return match.group(1) if match else None


def _parse_time(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _sort_key(video: VideoDescriptor) -> datetime:
    return video.published_at or _EPOCH


class YouTubeApiProvider:
    """YouTube Data API v3: channel search and explicit video lookups."""

    name = "YouTube API"

    def __init__(self, api_key: str | None, session: requests.Session | None = None) -> None:
        self.api_key = api_key
        self.session = session or requests.Session()

    def fetch(self, request: VideoRequest) -> list[VideoDescriptor]:
        if not self.api_key:
            raise SourceUnavailableError("YouTube API key is not configured")

        videos: list[VideoDescriptor] = []
        if request.video_ids:
            videos.extend(self._fetch_ids(request.video_ids))

        last_error: SourceUnavailableError | None = None
        for channel_id in request.channel_ids:
            try:
                found = self._fetch_channel(channel_id)
            except QuotaExceededError as exc:
                logger.warning("YouTube API quota exceeded at channel %s", channel_id)
                raise QuotaExceededError(str(exc), partial=videos) from exc
            except SourceUnavailableError as exc:
                logger.warning("YouTube API error for channel %s: %s", channel_id, exc)
                last_error = exc
                continue
            logger.debug("YouTube API: %d videos for channel %s", len(found), channel_id)
            videos.extend(found)

        if not videos and last_error is not None:
            raise last_error
        return videos

    def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "key": self.api_key}
        try:
            resp = self.session.get(f"{YOUTUBE_API_URL}/{endpoint}", params=params, timeout=_REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise SourceUnavailableError(f"YouTube API request failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if not resp.ok:
            error = data.get("error") or {}
            reasons = [e.get("reason") for e in error.get("errors") or []]
            if "quotaExceeded" in reasons:
                raise QuotaExceededError("YouTube API quota exceeded")
            raise SourceUnavailableError(error.get("message") or f"YouTube API error: {resp.status_code}")
        return data

    def _fetch_channel(self, channel_id: str) -> list[VideoDescriptor]:
        data = self._get(
            "search",
            {
                "channelId": channel_id,
                "part": "snippet,id",
                "order": "date",
                "maxResults": 20,
            },
        )
        videos = []
        for item in data.get("items") or []:
            video_id = (item.get("id") or {}).get("videoId")
            if not video_id:
                continue
            videos.append(self._descriptor(video_id, item.get("snippet") or {}))
        return videos

    def _fetch_ids(self, video_ids: list[str]) -> list[VideoDescriptor]:
        data = self._get("videos", {"id": ",".join(video_ids), "part": "snippet"})
        return [
            self._descriptor(item["id"], item.get("snippet") or {})
            for item in data.get("items") or []
            if item.get("id")
        ]

    @staticmethod
    def _descriptor(video_id: str, snippet: dict[str, Any]) -> VideoDescriptor:
        thumbs = snippet.get("thumbnails") or {}
        thumb = (thumbs.get("medium") or thumbs.get("default") or {}).get("url")
        return VideoDescriptor(
            id=video_id,
            title=snippet.get("title") or video_id,
            url=WATCH_URL.format(video_id=video_id),
            thumbnail=thumb or THUMBNAIL_URL.format(video_id=video_id),
            source=VideoSource.YOUTUBE,
            published_at=_parse_time(snippet.get("publishedAt")),
        )


class RssFeedProvider:
    """Channel Atom feeds; needs no API key and has no quota."""

    name = "RSS"

    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session or requests.Session()

    def fetch(self, request: VideoRequest) -> list[VideoDescriptor]:
        feeds = list(request.feed_urls)
        feeds.extend(YOUTUBE_FEED_URL.format(channel_id=c) for c in request.channel_ids)

        videos: list[VideoDescriptor] = []
        errors: list[str] = []
        for feed_url in feeds:
            try:
                resp = self.session.get(feed_url, timeout=_REQUEST_TIMEOUT)
                resp.raise_for_status()
                found = parse_feed(resp.text)
            except (requests.RequestException, ET.ParseError) as exc:
                logger.warning("RSS feed %s failed: %s", feed_url, exc)
                errors.append(str(exc))
                continue
            logger.debug("RSS: %d videos from %s", len(found), feed_url)
            videos.extend(found)

        if not videos and errors:
            raise SourceUnavailableError(f"RSS error: {errors[-1]}")
        return videos


def parse_feed(text: str) -> list[VideoDescriptor]:
    """Parse a YouTube channel Atom feed into descriptors."""
    root = ET.fromstring(text.strip())
    videos = []
    for entry in root.iter(f"{_ATOM}entry"):
        link = entry.find(f"{_ATOM}link")
        href = link.get("href", "") if link is not None else ""
        video_id = entry.findtext(f"{_YT}videoId") or parse_video_id(href)
        if not video_id:
            logger.debug("Skipping feed entry without a video id: %s", href)
            continue
        thumb = entry.find(f"{_MEDIA}group/{_MEDIA}thumbnail")
        videos.append(
            VideoDescriptor(
                id=video_id,
                title=(entry.findtext(f"{_ATOM}title") or video_id).strip(),
                url=WATCH_URL.format(video_id=video_id),
                thumbnail=thumb.get("url", "") if thumb is not None else THUMBNAIL_URL.format(video_id=video_id),
                source=VideoSource.RSS,
                published_at=_parse_time(entry.findtext(f"{_ATOM}published")),
            )
        )
    return videos


class OEmbedProvider:
    """Resolve a single pasted URL (or explicit ids) without an API key."""

    name = "oEmbed"

    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session or requests.Session()

    def fetch(self, request: VideoRequest) -> list[VideoDescriptor]:
        ids: list[str] = []
        if request.url:
            video_id = parse_video_id(request.url)
            if video_id is None:
                raise SourceUnavailableError(f"Not a YouTube URL: {request.url}")
            ids.append(video_id)
        ids.extend(v for v in request.video_ids if v not in ids)
        return [self._lookup(video_id) for video_id in ids]

    def _lookup(self, video_id: str) -> VideoDescriptor:
        watch = WATCH_URL.format(video_id=video_id)
        try:
            resp = self.session.get(
                YOUTUBE_OEMBED_URL,
                params={"url": watch, "format": "json"},
                timeout=_REQUEST_TIMEOUT,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise SourceUnavailableError(f"oEmbed lookup failed for {video_id}: {exc}") from exc
        return VideoDescriptor(
            id=video_id,
            title=data.get("title") or video_id,
            url=watch,
            thumbnail=data.get("thumbnail_url") or THUMBNAIL_URL.format(video_id=video_id),
            source=VideoSource.OEMBED,
            published_at=None,
        )


def default_providers(cfg: dict[str, Any], session: requests.Session | None = None) -> list[VideoProvider]:
    """API first when a key is configured, then feeds, then oEmbed."""
    session = session or requests.Session()
    providers: list[VideoProvider] = []
    if cfg.get("youtube_api_key"):
        providers.append(YouTubeApiProvider(cfg["youtube_api_key"], session=session))
    providers.append(RssFeedProvider(session=session))
    providers.append(OEmbedProvider(session=session))
    return providers


def request_from_config(cfg: dict[str, Any], url: str | None = None) -> VideoRequest:
    if url:
        return VideoRequest(url=url)
    return VideoRequest(
        channel_ids=list(cfg.get("channel_ids") or []),
        video_ids=list(cfg.get("video_ids") or []),
        feed_urls=list(cfg.get("feed_urls") or []),
    )


def fetch_videos(request: VideoRequest, providers: list[VideoProvider]) -> list[VideoDescriptor]:
    """Return descriptors from the first provider that yields any, newest first.

    A provider that hits its quota part-way hands over what it fetched and
    the next provider fills in the rest. Raises SourceUnavailableError naming
    every provider's failure when none produced a descriptor.
    """
    failures: list[str] = []
    collected: list[VideoDescriptor] = []
    for provider in providers:
        logger.info("Fetching videos from %s", provider.name)
        try:
            videos = provider.fetch(request)
        except QuotaExceededError as exc:
            logger.warning("%s quota exceeded: %s", provider.name, exc)
            failures.append(f"{provider.name}: {exc}.")
            if exc.partial:
                logger.info("Keeping %d videos from %s, trying the next source", len(exc.partial), provider.name)
                collected.extend(exc.partial)
            continue
        except SourceUnavailableError as exc:
            logger.warning("%s unavailable: %s", provider.name, exc)
            failures.append(f"{provider.name}: {exc}.")
            continue
        if not videos:
            failures.append(f"{provider.name}: no videos found.")
            continue
        logger.info("Found %d videos via %s", len(videos), provider.name)
        collected.extend(videos)
        break

    if not collected:
        message = " ".join(["No videos found from any source.", *failures])
        raise SourceUnavailableError(message)

    # Earlier providers win on duplicate ids.
    unique: dict[str, VideoDescriptor] = {}
    for video in collected:
        unique.setdefault(video.id, video)
    return sorted(unique.values(), key=_sort_key, reverse=True)
