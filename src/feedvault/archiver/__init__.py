"""归档产物生成."""

from feedvault.archiver.page import CaptureError, PageArchiver

__all__ = ["CaptureError", "PageArchiver"]
