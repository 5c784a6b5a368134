"""Format summarizer for ``v4l2-ctl --list-formats-ext`` output.

Turns the nested format / size / interval listing into one FormatDescriptor
per pixel format and decides whether the device is usable for capture.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from v4lsaver.core.models import FormatDescriptor, FormatStatus, FormatSummary, Resolution

logger = logging.getLogger(__name__)

# Lookahead windows, in lines
FORMAT_BLOCK_WINDOW = 100
FRAMERATE_WINDOW = 20

_FORMAT_HEADER = re.compile(r"^\s*\[\d+\]:")
_FORMAT_NAME = re.compile(r"'([^']*)'")
_DISCRETE_SIZE = re.compile(r"Size:\s*Discrete\s+(\d+)x(\d+)")
_FRAMERATE = re.compile(r"(\d+(?:\.\d+)?)\s*fps")


def _best_resolution(block: List[str]) -> Optional[Resolution]:
    sizes = [
        Resolution(int(m.group(1)), int(m.group(2)))
        for m in (_DISCRETE_SIZE.search(line) for line in block)
        if m
    ]
    if not sizes:
        return None
    return max(sizes, key=Resolution.to_tuple)


def _best_framerate(block: List[str], resolution: Resolution) -> Optional[float]:
    rates: List[float] = []
    for index, line in enumerate(block):
        m = _DISCRETE_SIZE.search(line)
        if not m or Resolution(int(m.group(1)), int(m.group(2))) != resolution:
            continue
        for follower in block[index + 1 : index + 1 + FRAMERATE_WINDOW]:
            if "Size:" in follower:
                break
            rates.extend(float(rate) for rate in _FRAMERATE.findall(follower))
    return max(rates) if rates else None


def summarize_formats(text: str) -> FormatSummary:
    """Summarize a device's format listing.

    Args:
        text: Raw format-listing text for one device

    Returns:
        FormatSummary with descriptors in order of appearance. The device is
        usable when at least one format advertises a discrete resolution.
    """
    if not text or not text.strip():
        return FormatSummary(formats=[], status=FormatStatus.NO_FORMATS)

    lines = text.splitlines()
    headers = [i for i, line in enumerate(lines) if _FORMAT_HEADER.match(line)]

    formats: List[FormatDescriptor] = []
    for position, start in enumerate(headers):
        name_match = _FORMAT_NAME.search(lines[start])
        if name_match is None:
            logger.debug(f"Skipping format entry without a name: {lines[start].strip()!r}")
            continue

        end = headers[position + 1] if position + 1 < len(headers) else len(lines)
        end = min(end, start + 1 + FORMAT_BLOCK_WINDOW)
        block = lines[start + 1 : end]

        descriptor = FormatDescriptor(name=name_match.group(1))
        descriptor.max_resolution = _best_resolution(block)
        if descriptor.max_resolution is not None:
            descriptor.max_fps = _best_framerate(block, descriptor.max_resolution)
        formats.append(descriptor)

    if not formats:
        status = FormatStatus.UNPARSEABLE
    elif any(fmt.max_resolution is not None for fmt in formats):
        status = FormatStatus.USABLE
    else:
        status = FormatStatus.NO_RESOLUTIONS

    return FormatSummary(formats=formats, status=status)
