import re
from typing import Optional
from urllib.parse import quote_plus, unquote, urlparse


# ===========================
# URL Formatting
# ===========================
def format_url(url: str, base_url: str) -> str:
    if not url:
        return ""

    if url.startswith("//"):
        return f"https:{url}"

    if url.startswith("http://") or url.startswith("https://"):
        return url

    if url.startswith("/"):
        return f"{base_url}{url}"

    return f"{base_url}/{url}"


# ===========================
# URL Parameter Encoding
# ===========================
def quote_url_param(param: str) -> str:
    return quote_plus(param)


# ===========================
# Path Parameter Decoding
# ===========================
def decode_path_param(param: str) -> str:
    return unquote(param)


# ===========================
# Query Default
# ===========================
def default_if_empty(value: Optional[str], default: int = 1):
    if value is None or value == "":
        return default
    return value


# ===========================
# Slug Extraction
# ===========================
def extract_slug(href: str) -> str:
    if not href:
        return ""

    path = urlparse(href).path if href.startswith("http") else href
    return path.rstrip("/").split("/")[-1]


# ===========================
# Text Normalization
# ===========================
def clean_text(text: Optional[str]) -> str:
    if not text:
        return ""
    return " ".join(text.split()).strip()


def strip_label(text: Optional[str], label: str) -> str:
    cleaned = clean_text(text)
    return re.sub(rf"^{re.escape(label)}\s*:?\s*", "", cleaned, flags=re.IGNORECASE).strip()
