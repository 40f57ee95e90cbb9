"""
Favicon retrieval and inline encoding for bkm.

Icons are stored inline on the bookmark row as ``data:<type>;base64,<data>``
URIs so the UI can render them without a second request. The bare base64
payload written by older versions is still accepted when reading.
"""
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import urlsplit

import requests

from bkm.config import get_config
from bkm.constants import DEFAULT_FAVICON
from bkm.errors import FaviconError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/png"


@dataclass(frozen=True)
class Icon:
    """Raw icon bytes and their media type."""
    content_type: str
    data: bytes


class IconProvider(Protocol):
    """Anything that can return the icon of a site given one of its URLs."""

    def fetch(self, url: str) -> Icon:
        ...


def site_of(url: str) -> str:
    """
    Reduce a bookmark URL to ``scheme://host``.

    Raises:
        FaviconError: If the URL has no host
    """
    parts = urlsplit(url.strip())
    if not parts.netloc:
        raise FaviconError(f"cannot derive a site from {url!r}")
    return f"{parts.scheme or 'http'}://{parts.netloc}"


class GoogleIconProvider:
    """Fetch icons from the Google favicon service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        user_agent: Optional[str] = None,
        verify_ssl: Optional[bool] = None,
    ):
        """
        Initialize the provider.

        Args:
            base_url: Service URL the site is appended to
            timeout: Request timeout in seconds
            user_agent: Custom user agent string
            verify_ssl: Verify TLS certificates
        """
        config = get_config()
        self.base_url = base_url or config.favicon_provider_url
        self.timeout = timeout or config.favicon_timeout
        self.user_agent = user_agent or config.user_agent
        self.verify_ssl = config.verify_ssl if verify_ssl is None else verify_ssl
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": self.user_agent})

    def request_url(self, url: str) -> str:
        return self.base_url + site_of(url)

    def fetch(self, url: str) -> Icon:
        """
        Fetch the icon of the site hosting ``url``.

        Raises:
            FaviconError: On network errors, non-200 answers or empty bodies
        """
        request_url = self.request_url(url)
        logger.debug("Fetching favicon %s", request_url)

        try:
            response = self.session.get(request_url, timeout=self.timeout, verify=self.verify_ssl)
        except requests.Timeout as e:
            raise FaviconError(f"favicon request timed out for {url}") from e
        except requests.RequestException as e:
            raise FaviconError(f"favicon request failed for {url}: {e}") from e

        if response.status_code != 200:
            raise FaviconError(f"favicon service answered HTTP {response.status_code} for {url}")
        if not response.content:
            raise FaviconError(f"favicon service returned no data for {url}")

        content_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        return Icon(content_type=content_type or DEFAULT_CONTENT_TYPE, data=response.content)


def encode_favicon(icon: Icon, legacy: bool = False) -> str:
    """
    Encode an icon for storage.

    Args:
        icon: Icon to encode
        legacy: Store the bare base64 payload without the data URI prefix

    Returns:
        Inline-encoded icon string
    """
    payload = base64.b64encode(icon.data).decode("ascii")
    if legacy:
        return payload
    return f"data:{icon.content_type};base64,{payload}"


def decode_favicon(value: Optional[str]) -> Optional[Icon]:
    """
    Decode a stored favicon string.

    Accepts data URIs and bare base64 payloads (assumed PNG).

    Returns:
        Icon, or None for empty or malformed values
    """
    if not value:
        return None

    content_type = DEFAULT_CONTENT_TYPE
    payload = value
    if value.startswith("data:"):
        meta, sep, payload = value[5:].partition(",")
        if not sep or not meta.endswith(";base64"):
            return None
        content_type = meta[:-len(";base64")] or DEFAULT_CONTENT_TYPE

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None
    return Icon(content_type=content_type, data=data)


def favicon_or_default(value: Optional[str]) -> str:
    """Stored favicon as a data URI, or the placeholder icon when unset."""
    if not value:
        return DEFAULT_FAVICON
    if value.startswith("data:"):
        return value
    return f"data:{DEFAULT_CONTENT_TYPE};base64,{value}"
