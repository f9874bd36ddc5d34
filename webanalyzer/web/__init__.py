"""Web host package — serves the analyzer form as a single HTML page."""

from webanalyzer.web.app import create_app

__all__ = ["create_app"]
