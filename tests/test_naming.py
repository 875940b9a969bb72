import pytest

from pipeline.naming import classify_filename, sanitize_artist_name, FORBIDDEN_CHARACTERS


@pytest.mark.parametrize("filename, artist", [
    ("Metallica - Master of Puppets.mp3", "Metallica"),
    ("ACDC - Thunderstruck (Live) [Remastered].flac", "ACDC"),
    ("Drake ft. Rihanna - Take Care.mp3", "Drake ft. Rihanna"),
    ("  The Beatles   -   Let It Be.ogg", "The Beatles"),
    ("Artist-Title.wav", "Artist"),
    ("Pink Floyd - The Wall - Hey You.m4a", "Pink Floyd"),
    ("Кино - Группа крови.mp3", "Кино"),
])
def test_classify_matches_artist_title(filename, artist):
    result = classify_filename(filename)
    assert result.matched
    assert result.raw_artist == artist


@pytest.mark.parametrize("filename", [
    "NoHyphenHere.mp3",
    "Artist - Title.Part.2.mp3",
    "Artist - Title",
    "- Title.mp3",
    "   - Title.mp3",
    "readme.txt",
])
def test_classify_rejects_other_shapes(filename):
    result = classify_filename(filename)
    assert not result.matched
    assert result.raw_artist is None


@pytest.mark.parametrize("raw, expected", [
    ("Metallica", "Metallica"),
    ("  Metallica  ", "Metallica"),
    ("[01] Artist", "Artist"),
    ("[01]Artist", "Artist"),
    ("12. Artist", "Artist"),
    ("Artist (Live)", "Artist"),
    ("Artist [Remastered]", "Artist"),
    ("Drake ft. Rihanna", "Drake"),
    ("Eminem feat. Dido", "Eminem"),
    ("Tiesto vs. Armin van Buuren", "Tiesto"),
    ("AC/DC", "AC & DC"),
    ("Back\\Slash", "Back & Slash"),
    ("Artist: Name", "Artist - Name"),
    ("What?", "What"),
    ("Star*", "Star"),
    ('Say "Hi"', "Say 'Hi'"),
    ("<Tag>", "(Tag)"),
    ("A|B", "A-B"),
])
def test_sanitize(raw, expected):
    assert sanitize_artist_name(raw) == expected


def test_sanitize_steps_run_in_order():
    # The bracket step runs after the parenthesis step, so only "[2020]" goes
    assert sanitize_artist_name("Artist (Live) [2020]") == "Artist (Live)"
    # The "[n]" marker is only stripped at the very start
    assert sanitize_artist_name("1. [2] Artist") == "[2] Artist"


def test_sanitize_feature_markers_are_case_sensitive():
    assert sanitize_artist_name("Artist FT. Guest") == "Artist FT. Guest"
    assert sanitize_artist_name("Artist Feat. Guest") == "Artist Feat. Guest"


@pytest.mark.parametrize("raw", ["", "   ", "[3]", "  [3]   ", "7.", "??", "**"])
def test_sanitize_returns_empty_when_nothing_is_left(raw):
    assert sanitize_artist_name(raw) == ""


@pytest.mark.parametrize("raw", [
    'a:b/c\\d?e*f"g<h>i|j',
    "::://",
    "[1] What?/Who* (Live)",
    'Weird <"Name"> | Band',
    "Artist\\ ft. Other",
])
def test_sanitize_never_returns_forbidden_characters(raw):
    result = sanitize_artist_name(raw)
    assert not any(ch in result for ch in FORBIDDEN_CHARACTERS)
    assert result == result.strip()


@pytest.mark.parametrize("raw", [
    "Metallica",
    "AC/DC",
    "Simon: Garfunkel",
    "Guns N' Roses",
    "The Artist (Formerly Known)",
    "Beyoncé",
])
def test_sanitize_is_idempotent_on_clean_names(raw):
    once = sanitize_artist_name(raw)
    assert sanitize_artist_name(once) == once


@pytest.mark.parametrize("raw", [
    "١٢. Artist",
    "[١٢] Artist",
    "Artist\u00a0ft.\u00a0Guest",
    "Artist\u00a0(Live)",
])
def test_sanitize_digits_and_spaces_are_ascii_only(raw):
    assert sanitize_artist_name(raw) == raw


def test_classify_extension_is_ascii_only():
    assert not classify_filename("Artist - Title.мрз").matched
    assert classify_filename("Artist - Title.mp3").matched
