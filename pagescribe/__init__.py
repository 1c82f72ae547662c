"""PageScribe: turn a crawled page into a Playwright test suite."""

__version__ = "0.1.0"
