"""
Location resolution for enrichment lookups.

Derives a place name from a SummonsRecord; an empty result means there is
no usable location and enrichment is skipped.
"""

import re

from schemas import SummonsRecord

# Leading province-level segment, e.g. "江苏省" or "广西壮族自治区"
_PROVINCE_PREFIX = re.compile(r"^[^市区县]*?(?:特别行政区|自治区|省)")
# City / prefecture / district / county token
_ADMIN_TOKEN = re.compile(r"([\u4e00-\u9fa5A-Za-z]+?(?:州市|市|州|区|县))")
_SEGMENT_SPLIT = re.compile(r"[，,。.\s]+")


def _normalize(value: str | None) -> str:
    return value.strip() if value else ""


def admin_token(text: str) -> str | None:
    """First city/prefecture/district/county token, ignoring a province prefix."""
    without_province = _PROVINCE_PREFIX.sub("", text, count=1)
    match = _ADMIN_TOKEN.search(without_province)
    return match.group(1) if match else None


def _address_location(address: str) -> str:
    """Administrative token if present, else the first address segment."""
    token = admin_token(address)
    if token:
        return token

    segments = [segment for segment in _SEGMENT_SPLIT.split(address) if segment]
    if segments:
        return segments[0]
    return address


def resolve_location(record: SummonsRecord) -> str:
    """
    Pick the lookup location for a summons.

    Order: court name, administrative token of the address, first address
    segment, summoned person, then "".
    """
    court = _normalize(record.court)
    if court:
        return court

    address = _normalize(record.court_address)
    if address:
        return _address_location(address)

    return _normalize(record.summoned_person)
