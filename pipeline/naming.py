"""
Filename classification and artist name sanitization.

Both functions are pure: they look only at the strings they are given.
"""

import re
from typing import List, Pattern, Tuple

from models.schemas import ParseResult

# "Artist - Title.ext" or "Artist - Album - Title.ext". The artist runs up to
# the first hyphen; the remainder may not contain a dot before the extension.
# Character classes are ASCII-only: a no-break space or Arabic-Indic digits
# are kept as part of the name.
FILENAME_PATTERN = re.compile(r"([^\-]+?)\s*-\s*[^.]+\.\w+", re.ASCII)

# Applied in order, each once. Later steps assume the earlier ones ran:
# the index markers are only at the start once the name is trimmed, and the
# feature suffixes are matched after trailing groups are gone.
STRIP_STEPS: List[Tuple[Pattern, str]] = [
    (re.compile(r"^\[\d+\]\s*", re.ASCII), ""),       # [12] Artist
    (re.compile(r"^\d+\.\s*", re.ASCII), ""),         # 12. Artist
    (re.compile(r"\s+\([^)]*\)$", re.ASCII), ""),     # Artist (Live)
    (re.compile(r"\s+\[[^\]]*\]$", re.ASCII), ""),    # Artist [Remastered]
    (re.compile(r"\s+ft\.\s+.*$", re.ASCII), ""),     # Artist ft. Guest
    (re.compile(r"\s+feat\.\s+.*$", re.ASCII), ""),   # Artist feat. Guest
    (re.compile(r"\s+vs\.\s+.*$", re.ASCII), ""),     # Artist vs. Other
]

# Characters that are not allowed in a folder name on common filesystems
CHARACTER_SUBSTITUTIONS = str.maketrans({
    ':': ' -',
    '/': ' & ',
    '\\': ' & ',
    '?': '',
    '*': '',
    '"': "'",
    '<': '(',
    '>': ')',
    '|': '-',
})

FORBIDDEN_CHARACTERS = ':/\\?*"<>|'


def classify_filename(filename: str) -> ParseResult:
    """
    Extract the raw artist from a filename shaped like "Artist - Title.ext".

    Args:
        filename: Base filename including its extension

    Returns:
        ParseResult.match(artist) with the artist trimmed, or
        ParseResult.unmatched() when the name does not have that shape
    """
    match = FILENAME_PATTERN.fullmatch(filename)
    if match is None:
        return ParseResult.unmatched()

    artist = match.group(1).strip()
    if not artist:
        return ParseResult.unmatched()

    return ParseResult.match(artist)


def sanitize_artist_name(raw: str) -> str:
    """
    Turn a raw artist substring into a name usable as a single folder name.

    Strips track index markers, trailing parenthesized or bracketed groups and
    featured-artist suffixes, then replaces characters that are illegal in
    path components. An empty return value means the artist could not be
    determined.
    """
    result = raw.strip()

    for pattern, replacement in STRIP_STEPS:
        result = pattern.sub(replacement, result, count=1)

    result = result.translate(CHARACTER_SUBSTITUTIONS)

    return result.strip()
