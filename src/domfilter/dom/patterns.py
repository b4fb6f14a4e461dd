# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Static pattern and tag tables shared by the feature model and every engine.

Plain substring tables (not regexes): "ad" deliberately matches inside
"ad-banner", "header" and "download" alike.
"""

from __future__ import annotations

# Known advertising patterns in class names and IDs
AD_PATTERNS: tuple[str, ...] = (
    "ad",
    "ads",
    "advert",
    "advertisement",
    "banner",
    "sponsor",
    "promoted",
    "promo",
    "commercial",
    "marketing",
    "adsense",
    "doubleclick",
    "taboola",
    "outbrain",
    "prebid",
    "ad-slot",
    "ad-container",
    "ad-wrapper",
    "ad-unit",
    "google-ad",
    "dfp-ad",
    "gpt-ad",
)

TRACKER_PATTERNS: tuple[str, ...] = (
    "tracker",
    "tracking",
    "analytics",
    "pixel",
    "beacon",
    "telemetry",
    "fingerprint",
    "cookie-banner",
    "cookie-consent",
    "gdpr",
    "ccpa",
    "privacy-notice",
    "newsletter-popup",
    "subscribe-modal",
    "popup-overlay",
)

# iframe src substrings (some entries carry a path, e.g. facebook.com/tr)
AD_DOMAINS: tuple[str, ...] = (
    "doubleclick.net",
    "googlesyndication.com",
    "googleadservices.com",
    "moatads.com",
    "amazon-adsystem.com",
    "facebook.com/tr",
    "adnxs.com",
    "criteo.com",
    "taboola.com",
    "outbrain.com",
)

DATA_AD_PREFIXES: tuple[str, ...] = ("data-ad", "data-tracking")

# ---- Tag groups ----
SCRIPT_TAGS = frozenset({"script", "noscript"})
INTERACTIVE_TAGS = frozenset({"button", "input", "textarea", "select", "form"})
MEDIA_TAGS = frozenset({"img", "video", "audio", "picture", "canvas"})
STRUCTURAL_TAGS = frozenset({"header", "footer"})

# Tag category code for feature slot 0 (normalized by TAG_CATEGORY_MAX)
TAG_CATEGORIES: dict[str, int] = {
    **dict.fromkeys(("div", "span", "section", "article"), 1),
    **dict.fromkeys(("p", "h1", "h2", "h3", "h4", "h5", "h6"), 2),
    "a": 3,
    **dict.fromkeys(SCRIPT_TAGS, 4),
    "style": 5,
    "nav": 6,
    **dict.fromkeys(INTERACTIVE_TAGS, 7),
    **dict.fromkeys(MEDIA_TAGS, 8),
    "iframe": 9,
    **dict.fromkeys(STRUCTURAL_TAGS, 10),
    **dict.fromkeys(("ul", "ol", "li"), 11),
    **dict.fromkeys(("table", "tr", "td", "th"), 12),
}
TAG_CATEGORY_MAX = 12


def class_id_string(attributes: dict[str, str], *, id_first: bool = False) -> str:
    """Lowercased ``"class id"`` (or ``"id class"``) haystack for substring matching."""
    cls = attributes.get("class", "")
    eid = attributes.get("id", "")
    joined = f"{eid} {cls}" if id_first else f"{cls} {eid}"
    return joined.lower()


def matches_any(haystack: str, patterns: tuple[str, ...]) -> bool:
    return any(p in haystack for p in patterns)


def has_data_ad_attr(attributes: dict[str, str]) -> bool:
    return any(key.startswith(DATA_AD_PREFIXES) for key in attributes)


def is_ad_url(url: str) -> bool:
    lower = url.lower()
    return any(domain in lower for domain in AD_DOMAINS)
