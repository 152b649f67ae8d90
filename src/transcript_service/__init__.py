"""YouTube transcript extraction service backed by yt-dlp."""

__version__ = "0.1.0"
