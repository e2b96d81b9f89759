"""Transcript client - pulls plain-text transcripts for YouTube links."""

import re
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

from youtube_transcript_api import YouTubeTranscriptApi

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract the 11-character video ID from a YouTube URL.

    Supports watch, youtu.be, shorts, embed and live links as well as bare IDs.
    """
    url = (url or "").strip()
    if VIDEO_ID_PATTERN.match(url):
        return url

    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = parsed.netloc.lower()
    if host.startswith("www.") or host.startswith("m."):
        host = host.split(".", 1)[1]

    candidate = None
    if host == "youtu.be":
        candidate = parsed.path.lstrip("/").split("/")[0]
    elif host.endswith("youtube.com"):
        if parsed.path == "/watch":
            candidate = parse_qs(parsed.query).get("v", [None])[0]
        else:
            parts = [p for p in parsed.path.split("/") if p]
            if len(parts) >= 2 and parts[0] in ("shorts", "embed", "live", "v"):
                candidate = parts[1]

    if candidate and VIDEO_ID_PATTERN.match(candidate):
        return candidate
    return None


class TranscriptClient:
    """Fetches YouTube transcripts; never raises on a missing transcript."""

    def __init__(self, logger: Any, api: Optional[YouTubeTranscriptApi] = None):
        self.logger = logger
        self.api = api

    def extract_transcript(self, url: str) -> Optional[str]:
        """
        Fetch a transcript and join its snippets into one string.

        Returns:
            Transcript text, or None when the link has no usable transcript
        """
        video_id = extract_video_id(url)
        if not video_id:
            self.logger.warning(f"Could not find a YouTube video ID in {url}")
            return None

        try:
            api = self.api or YouTubeTranscriptApi()
            fetched = api.fetch(video_id)
            text = " ".join(snippet.text.strip() for snippet in fetched if snippet.text and snippet.text.strip())
        except Exception as e:
            self.logger.warning(f"Failed to fetch YouTube transcript for {url}: {e}")
            return None

        return text or None
