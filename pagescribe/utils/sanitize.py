"""URL normalization for analysis targets."""

from urllib.parse import urlparse


def sanitize_url(url: str) -> str:
    """Strip whitespace, default the scheme to https and drop the fragment."""
    url = url.strip()
    if url and "://" not in url:
        url = f"https://{url}"
    parsed = urlparse(url)
    return parsed._replace(fragment="").geturl()
