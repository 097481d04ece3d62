"""
Embedded metadata for a single image file.
Loads the tag set with Pillow and flattens the fixed field set into a tags report row.
"""
import asyncio
import logging
import re
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Dict, Optional, Tuple, Union
from zoneinfo import ZoneInfo

from PIL import Image, UnidentifiedImageError
from PIL.ExifTags import TAGS

from .value_normalizer import Tag, normalize_tag_value, MISSING


logger = logging.getLogger(__name__)

TAG_COLUMNS = [
    'File Path',
    'File Type',
    'Date Time',
    'Date Time (ms)',
    'Image Width',
    'Image Length',
    'Compression',
    'Make',
    'Model',
    'Software',
    'Device Manufacturer',
    'Device Model Number',
]

# Report column -> tag name, for the fields copied straight through
DIRECT_FIELDS = {
    'File Type': 'FileType',
    'Image Width': 'ImageWidth',
    'Image Length': 'ImageLength',
    'Compression': 'Compression',
    'Make': 'Make',
    'Model': 'Model',
    'Software': 'Software',
    'Device Manufacturer': 'Device Manufacturer',
    'Device Model Number': 'Device Model Number',
}

# "YYYY:MM:DD HH:MM:SS" as written by cameras and scanners
EXIF_DATE_PATTERN = re.compile(r'(\d{4}):(\d{2}):(\d{2}) (\d{2}):(\d{2}):(\d{2})')
EXIF_DATE_REPLACEMENT = r'\1 \2 \3 \4:\5:\6'
REPARSED_DATE_FORMAT = '%Y %m %d %H:%M:%S'

# ICC profile header offsets
ICC_HEADER_SIZE = 128
ICC_MANUFACTURER_OFFSET = 48
ICC_MODEL_OFFSET = 52


class MetadataMissingError(ValueError):
    """Raised when a file has no parsable embedded metadata."""


def icc_device_tags(icc_profile: Optional[bytes]) -> Dict[str, Tag]:
    """
    Read the device manufacturer and model signatures from an ICC profile header.

    Both are 4-byte ASCII signatures, NUL padded when unset.
    """
    if not icc_profile or len(icc_profile) < ICC_HEADER_SIZE:
        return {}

    def signature(offset: int) -> str:
        return icc_profile[offset:offset + 4].decode('ascii', errors='replace')

    return {
        'Device Manufacturer': Tag(signature(ICC_MANUFACTURER_OFFSET)),
        'Device Model Number': Tag(signature(ICC_MODEL_OFFSET)),
    }


def _to_tag(value) -> Tag:
    if isinstance(value, tuple):
        return Tag(list(value))
    return Tag(value)


def load_tags(path: Union[str, Path]) -> Dict[str, Tag]:
    """
    Load the embedded tag set of an image.

    TIFF files expose their first IFD directly; other formats fall back
    to their EXIF block.

    Args:
        path: Path to the image file

    Returns:
        Mapping of tag name to Tag

    Raises:
        OSError: If the file can't be opened
        MetadataMissingError: If the file has no parsable tag segment
    """
    try:
        with Image.open(path) as img:
            raw = getattr(img, 'tag_v2', None) or img.getexif()
            tags = {TAGS.get(tag_id, str(tag_id)): _to_tag(value)
                    for tag_id, value in raw.items()}
            if not tags:
                raise MetadataMissingError(f"No embedded metadata in {path}")
            if img.format:
                tags['FileType'] = Tag(img.format.lower())
            tags.update(icc_device_tags(img.info.get('icc_profile')))
    except UnidentifiedImageError as e:
        raise MetadataMissingError(f"Unreadable metadata in {path}") from e

    return tags


def reparse_date_time(value: str, tz: Optional[tzinfo] = None) -> Tuple[str, str]:
    """
    Reparse a normalized DateTime value.

    "2021:06:15 10:30:00" is rewritten to "2021 06 15 10:30:00" and parsed
    in `tz` (local time when None).

    Args:
        value: The normalized DateTime tag value
        tz: Timezone the camera clock is assumed to be in

    Returns:
        (ISO-8601 UTC string with milliseconds, epoch milliseconds string),
        or ('-', '-') when the value isn't a valid date
    """
    rewritten = EXIF_DATE_PATTERN.sub(EXIF_DATE_REPLACEMENT, value)
    try:
        naive = datetime.strptime(rewritten, REPARSED_DATE_FORMAT)
    except ValueError:
        return MISSING, MISSING

    aware = naive.replace(tzinfo=tz) if tz is not None else naive.astimezone()
    utc = aware.astimezone(timezone.utc)
    iso = utc.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
    return iso, str(int(aware.timestamp() * 1000))


def tags_to_record(file_path: Union[str, Path], tags: Dict[str, Tag],
                   tz: Optional[tzinfo] = None) -> Dict[str, str]:
    """Flatten a loaded tag set into a tags report row."""
    date_time, date_time_ms = reparse_date_time(normalize_tag_value(tags.get('DateTime')), tz)

    record = {'File Path': str(file_path)}
    for column in TAG_COLUMNS[1:]:
        if column == 'Date Time':
            record[column] = date_time
        elif column == 'Date Time (ms)':
            record[column] = date_time_ms
        else:
            record[column] = normalize_tag_value(tags.get(DIRECT_FIELDS[column]))
    return record


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Resolve an IANA zone name; None keeps local time."""
    return ZoneInfo(name) if name else None


async def extract_tag_record(file_path: Union[str, Path],
                             tz: Optional[tzinfo] = None) -> Dict[str, str]:
    """
    Load and flatten the embedded metadata of a file.

    Args:
        file_path: Path to the image file
        tz: Timezone used for the date reparse (local time when None)

    Returns:
        A tags report row

    Raises:
        OSError: If the file can't be opened
        MetadataMissingError: If the file has no parsable tag segment
    """
    tags = await asyncio.to_thread(load_tags, file_path)
    record = tags_to_record(file_path, tags, tz)
    logger.debug(f"Tags: {file_path} (date {record['Date Time']})")
    return record
