"""YouTube Data API access.

This module turns YouTube URLs into VideoContent records for the pipeline.

Note:
    The YouTube API key is passed as a URL parameter, which is standard for
    the YouTube Data API. Ensure your API key is properly restricted in the
    Google Cloud Console (by IP or referrer) to prevent unauthorized use if
    logs containing URLs are exposed.

    The Data API lists caption tracks but only serves caption bodies to the
    video owner over OAuth, so ``fetch_video_transcript`` confirms a track
    exists and returns a placeholder instead of the spoken text.
"""

import logging
import re
from typing import Any, Dict, Iterable, Optional

import requests

from .config import YOUTUBE_API_BASE_URL, YOUTUBE_REQUEST_TIMEOUT
from .errors import ContentFetchError, InputValidationError, UpstreamError
from .models import VideoContent

logger = logging.getLogger(__name__)

_VIDEO_ID_PATTERN = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")

TRANSCRIPT_UNAVAILABLE = "Transcript unavailable"


def extract_video_id(url: Optional[str]) -> Optional[str]:
    """Extract the 11-character video ID from a YouTube URL.

    Handles watch, youtu.be, embed and v/ URL forms.

    Args:
        url: The URL to parse.

    Returns:
        The video ID or None if the URL is not a YouTube video URL.
    """
    if not url:
        return None
    match = _VIDEO_ID_PATTERN.match(url)
    if match and len(match.group(2)) == 11:
        return match.group(2)
    return None


def is_valid_youtube_url(url: Optional[str]) -> bool:
    """Check whether a URL points at a YouTube video."""
    return extract_video_id(url) is not None


def _get(endpoint: str, params: Dict[str, Any], action: str) -> Dict[str, Any]:
    """GET a Data API endpoint and return the JSON body.

    Raises:
        UpstreamError: On network failure or a non-2xx response.
    """
    try:
        response = requests.get(f"{YOUTUBE_API_BASE_URL}/{endpoint}", params=params, timeout=YOUTUBE_REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise UpstreamError(f"Failed to {action}: {e}") from e

    if not response.ok:
        message = f"Failed to {action}"
        try:
            message = response.json().get("error", {}).get("message") or message
        except ValueError:
            pass
        raise UpstreamError(message, status_code=response.status_code)

    return response.json()


def fetch_video_details(api_key: str, video_id: str) -> Dict[str, Any]:
    """Fetch the snippet and content details of one video.

    Args:
        api_key: YouTube Data API key.
        video_id: The video ID.

    Returns:
        The raw video resource.

    Raises:
        InputValidationError: If the key or ID is missing.
        UpstreamError: If the API call fails or the video does not exist.
    """
    if not api_key or not video_id:
        raise InputValidationError("API key and video ID are required")

    data = _get(
        "videos",
        {"part": "snippet,contentDetails", "id": video_id, "key": api_key},
        "fetch video details",
    )
    items = data.get("items") or []
    if not items:
        raise UpstreamError("Video not found", status_code=404)
    return items[0]


def fetch_video_transcript(api_key: str, video_id: str) -> str:
    """Look up the caption track of a video.

    Args:
        api_key: YouTube Data API key.
        video_id: The video ID.

    Returns:
        Placeholder transcript text naming the caption track found.

    Raises:
        UpstreamError: If the captions cannot be listed or none exist.
    """
    if not api_key or not video_id:
        raise InputValidationError("API key and video ID are required")

    data = _get("captions", {"part": "snippet", "videoId": video_id, "key": api_key}, "fetch captions")
    items = data.get("items") or []
    if not items:
        raise UpstreamError("No captions available for this video")

    track = next(
        (item for item in items if item.get("snippet", {}).get("language") in ("en", "en-US")),
        items[0],
    )
    language = track.get("snippet", {}).get("language", "unknown")
    logger.debug(f"Using caption track {track.get('id')} ({language}) for video {video_id}")

    # TODO: fetch caption bodies once an OAuth flow is available for captions.download
    return (
        f"Transcript for video {video_id} ({language} captions available; "
        "the caption text itself is not retrievable with an API key)"
    )


def scrape_youtube_content(api_key: str, url: str) -> VideoContent:
    """Collect everything the pipeline needs about one video.

    A missing transcript is not an error: it is replaced with
    "Transcript unavailable".

    Args:
        api_key: YouTube Data API key.
        url: The video URL.

    Returns:
        VideoContent for the video.

    Raises:
        InputValidationError: If the URL is not a YouTube video URL.
        UpstreamError: If the video details cannot be fetched.
    """
    video_id = extract_video_id(url)
    if not video_id:
        raise InputValidationError("Invalid YouTube URL")

    details = fetch_video_details(api_key, video_id)
    snippet = details.get("snippet", {})

    try:
        transcript = fetch_video_transcript(api_key, video_id)
    except UpstreamError as e:
        logger.warning(f"Could not fetch transcript for {video_id}: {e}")
        transcript = TRANSCRIPT_UNAVAILABLE

    return VideoContent(
        video_id=video_id,
        url=url,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        transcript=transcript,
        channel_title=snippet.get("channelTitle", ""),
        published_at=snippet.get("publishedAt"),
    )


def scrape_videos(api_key: str, urls: Iterable[str]) -> Dict[str, VideoContent]:
    """Scrape every URL, in order, stopping at the first failure.

    Blank URLs are skipped.

    Args:
        api_key: YouTube Data API key.
        urls: Video URLs.

    Returns:
        VideoContent keyed by URL.

    Raises:
        ContentFetchError: If any video cannot be scraped.
    """
    content: Dict[str, VideoContent] = {}
    for url in urls:
        if not url:
            continue
        try:
            content[url] = scrape_youtube_content(api_key, url)
        except (InputValidationError, UpstreamError) as e:
            logger.error(f"Error scraping YouTube content from {url}: {e}")
            raise ContentFetchError(url, e) from e
        logger.info(f"Scraped '{content[url].title}' from {url}")
    return content


def validate_api_key(api_key: Optional[str]) -> bool:
    """Check a YouTube Data API key with a lightweight call.

    Args:
        api_key: The key to check.

    Returns:
        True if the key was accepted.
    """
    if not api_key:
        return False

    try:
        response = requests.get(
            f"{YOUTUBE_API_BASE_URL}/channels",
            params={"part": "id", "mine": "true", "maxResults": 1, "key": api_key},
            timeout=YOUTUBE_REQUEST_TIMEOUT,
        )
        if response.status_code in (400, 403):
            return False

        # channels?mine=true wants OAuth; a 401 says nothing about the key itself
        if response.status_code == 401:
            response = requests.get(
                f"{YOUTUBE_API_BASE_URL}/videos",
                params={"part": "id", "chart": "mostPopular", "maxResults": 1, "key": api_key},
                timeout=YOUTUBE_REQUEST_TIMEOUT,
            )
        return response.ok
    except requests.RequestException as e:
        logger.error(f"Error validating YouTube API key: {e}")
        return False
