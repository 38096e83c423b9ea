"""Tests for HTML/JSON/CSV rendering, filename sanitizing and Accept negotiation."""
import pytest

from playlist_web.errors import RenderError
from playlist_web.render import (
    HTML,
    JSON,
    TrackRow,
    csv_filename,
    negotiate,
    render_csv,
    render_html,
    render_json,
    sanitize_filename,
    track_rows,
)

ITEMS = [
    {"track": {"name": "Song A", "artists": [{"name": "X"}, {"name": "Y"}]}},
    {"track": None},
    {"track": {"name": "Song <B>", "artists": [{"name": "Z"}]}},
]


def test_track_rows_join_artists_and_skip_missing_tracks():
    rows = track_rows(ITEMS)
    assert rows == [TrackRow("Song A", "X, Y"), TrackRow("Song <B>", "Z")]


def test_render_html_escapes():
    out = render_html("My <Mix>", track_rows(ITEMS))
    assert "Playlist Name: My &lt;Mix&gt;" in out
    assert "<li>Song A: X, Y</li>" in out
    assert "Song &lt;B&gt;: Z" in out


def test_render_json_passes_items_through():
    out = render_json("Mix", ITEMS)
    assert out == {"playlistName": "Mix", "tracks": ITEMS}


def test_render_csv_header_and_quoting():
    out = render_csv([TrackRow("Song A", "X, Y"), TrackRow('Say "hi"', "Z")])
    lines = out.splitlines()
    assert lines[0] == '"title","artist"'
    assert lines[1] == '"Song A","X, Y"'
    assert lines[2] == '"Say ""hi""","Z"'


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Workout Mix #1!", "workout_mix_1_"),
        ("chill", "chill"),
        ("Été 2024", "_t_2024"),
    ],
)
def test_sanitize_filename(name, expected):
    assert sanitize_filename(name) == expected


@pytest.mark.parametrize("name", ["", "   ", None])
def test_sanitize_filename_rejects_empty(name):
    with pytest.raises(RenderError):
        sanitize_filename(name)


def test_csv_filename_falls_back_for_empty_name():
    assert csv_filename("") == "playlist.csv"
    assert csv_filename("Workout Mix #1!") == "workout_mix_1_.csv"


@pytest.mark.parametrize(
    "accept,expected",
    [
        (None, HTML),
        ("", HTML),
        ("*/*", HTML),
        ("text/html", HTML),
        ("application/json", JSON),
        ("text/html;q=0.5, application/json", JSON),
        ("application/json;q=0.9, text/html", HTML),
        ("application/*", JSON),
        ("text/html;q=0, */*", JSON),
        ("image/png", None),
    ],
)
def test_negotiate(accept, expected):
    assert negotiate(accept) == expected


def test_track_rows_tolerate_null_artist_names():
    items = [{"track": {"name": None, "artists": [{"name": None}, None, {"name": "Z"}]}}]
    assert track_rows(items) == [TrackRow("", ", , Z")]
