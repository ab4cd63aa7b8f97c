"""
Field and image extraction from parsed post pages.

Both entry points are best-effort: they never raise and fall back to an
empty string or an empty list.
"""
import json
import re
from typing import Any, Iterable, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .utils.logging import get_logger

logger = get_logger(__name__)

MAX_IMAGES = 10
MAX_JSONLD_IMAGES = 5
# Background images are only scanned when the content selectors found fewer than this
BACKGROUND_SCAN_THRESHOLD = 5

# Ordered from the most specific media containers to generic article images
CONTENT_IMAGE_SELECTORS = (
    ".post-media img",
    ".truth-media img",
    ".media-attachments img",
    ".status__media img",
    ".post-image",
    ".truth-image",
    ".image-attachment",
    'article img:not([class*="avatar"]):not([class*="profile"])',
)

REJECTED_IMAGE_TOKENS = ("avatar", "profile", "icon")
LAZY_SOURCE_ATTRIBUTES = ("data-src",)

BACKGROUND_URL_RE = re.compile(r"""url\(['"]?([^'"]+)['"]?\)""")
IMAGE_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp)($|\?)", re.IGNORECASE)
MEDIA_PATH_MARKERS = ("/media/", "/uploads/")


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def extract_text(doc: BeautifulSoup, selectors: Iterable[str]) -> str:
    """Return the first non-empty trimmed text among the selector chain, else ''."""
    for selector in selectors:
        try:
            element = doc.select_one(selector)
        except Exception as e:
            logger.debug(f"Selector {selector!r} failed: {e}", extra={"subsys": "extract"})
            continue
        if element is None:
            continue
        text = element.get_text().strip()
        if text:
            return text
    return ""


def meta_content(doc: BeautifulSoup, *, prop: Optional[str] = None, name: Optional[str] = None) -> str:
    """Content of the first <meta> tag with the given property or name, else ''."""
    attrs = {"property": prop} if prop else {"name": name}
    tag = doc.find("meta", attrs=attrs)
    if tag is None:
        return ""
    content = tag.get("content")
    return content.strip() if isinstance(content, str) else ""


def first_image_source(doc: BeautifulSoup, selector: str) -> Optional[str]:
    """Source of the first image matching the selector, if any."""
    try:
        element = doc.select_one(selector)
    except Exception as e:
        logger.debug(f"Selector {selector!r} failed: {e}", extra={"subsys": "extract"})
        return None
    if element is None:
        return None
    src = element.get("src")
    return src if isinstance(src, str) and src else None


def _jsonld_images(data: Any) -> List[str]:
    """Pull the ``image`` field out of one decoded JSON-LD object."""
    if not isinstance(data, dict):
        return []
    image = data.get("image")
    if isinstance(image, str):
        return [image]
    if isinstance(image, list):
        urls = []
        for item in image[:MAX_JSONLD_IMAGES]:
            if isinstance(item, str):
                urls.append(item)
            elif isinstance(item, dict) and isinstance(item.get("url"), str):
                urls.append(item["url"])
        return urls
    if isinstance(image, dict) and isinstance(image.get("url"), str):
        return [image["url"]]
    return []


def _is_rejected(url: str) -> bool:
    return any(token in url for token in REJECTED_IMAGE_TOKENS)


def _looks_like_image(url: str) -> bool:
    return bool(IMAGE_EXTENSION_RE.search(url)) or any(m in url for m in MEDIA_PATH_MARKERS)


def _collect_images(doc: BeautifulSoup, add) -> None:
    # 1. Metadata tags
    for url in (meta_content(doc, prop="og:image"), meta_content(doc, name="twitter:image")):
        if url:
            add(url)

    # 2. Structured data
    for script in doc.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.string or script.get_text())
        except (json.JSONDecodeError, TypeError):
            continue
        for url in _jsonld_images(data):
            add(url)

    # 3. Content areas
    found = 0
    for selector in CONTENT_IMAGE_SELECTORS:
        if found >= MAX_IMAGES:
            break
        try:
            elements = doc.select(selector)
        except Exception as e:
            logger.debug(f"Selector {selector!r} failed: {e}", extra={"subsys": "extract"})
            continue
        for element in elements:
            if found >= MAX_IMAGES:
                break
            src = element.get("src")
            if isinstance(src, str) and src and not _is_rejected(src):
                add(src)
                found += 1
            for attribute in LAZY_SOURCE_ATTRIBUTES:
                if found >= MAX_IMAGES:
                    break
                deferred = element.get(attribute)
                if isinstance(deferred, str) and deferred and not _is_rejected(deferred):
                    add(deferred)
                    found += 1

    # 4. Inline background images, only when the content areas came up short
    if found < BACKGROUND_SCAN_THRESHOLD:
        for element in doc.select('[style*="background-image"]'):
            if found >= MAX_IMAGES:
                break
            match = BACKGROUND_URL_RE.search(element.get("style") or "")
            if match:
                add(match.group(1))
                found += 1


def extract_images(doc: BeautifulSoup, base_url: Optional[str] = None) -> List[str]:
    """
    Collect up to ten deduplicated post image URLs.

    Sources are scanned in priority order (metadata tags, JSON-LD, content
    selectors, inline background images) and the result keeps first-seen
    order. Only URLs with an image extension or a /media/ or /uploads/ path
    segment survive the final filter, metadata-sourced ones included.

    Args:
        doc: Parsed page
        base_url: If given, relative URLs are resolved against it
    """
    seen: dict = {}

    def add(url: str) -> None:
        url = url.strip()
        if not url:
            return
        if base_url:
            url = urljoin(base_url, url)
        seen.setdefault(url, None)

    try:
        _collect_images(doc, add)
    except Exception as e:
        logger.warning(f"Image extraction aborted: {e}", extra={"subsys": "extract"})

    images = [url for url in seen if _looks_like_image(url)]
    return images[:MAX_IMAGES]
