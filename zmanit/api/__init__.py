"""API routers."""

from zmanit.api import schedule

__all__ = ["schedule"]
