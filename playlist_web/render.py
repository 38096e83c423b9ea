"""
Output formats for a fetched playlist: HTML list, JSON passthrough, CSV download.
"""
import csv
import html
import io
import logging
import re
from dataclasses import dataclass

from playlist_web.errors import RenderError

logger = logging.getLogger(__name__)

FALLBACK_FILENAME = "playlist"

HTML = "html"
JSON = "json"

# Order matters: on equal q the first wins, and html is the default
_OFFERS = (
    (HTML, "text", "html"),
    (JSON, "application", "json"),
)


@dataclass
class TrackRow:
    title: str
    artist: str


def track_rows(items: list) -> list[TrackRow]:
    """Title and comma-joined artists per item. Items without a track (removed/local) are skipped."""
    rows = []
    for item in items:
        track = (item or {}).get("track")
        if not track:
            continue
        artists = ", ".join((a or {}).get("name") or "" for a in track.get("artists") or [])
        rows.append(TrackRow(title=track.get("name") or "", artist=artists))
    return rows


def render_html(playlist_name: str, rows: list[TrackRow]) -> str:
    items_html = "".join(
        f"<li>{html.escape(row.title)}: {html.escape(row.artist)}</li>" for row in rows
    )
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{html.escape(playlist_name)}</title></head>
<body>
  <h1>Playlist Name: {html.escape(playlist_name)}</h1>
  <h2>Track Titles and Artists</h2>
  <ul>{items_html}</ul>
  <p><a href="/playlist-details/csv">Download CSV</a></p>
</body>
</html>"""


def render_json(playlist_name: str, items: list) -> dict:
    return {"playlistName": playlist_name, "tracks": items}


def render_csv(rows: list[TrackRow]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["title", "artist"])
    for row in rows:
        writer.writerow([row.title, row.artist])
    return buf.getvalue()


def sanitize_filename(name: str | None) -> str:
    """
    Lowercase; every run of characters outside [a-z0-9] becomes one "_".
    "Workout Mix #1!" -> "workout_mix_1_". Raises RenderError for an empty name.
    """
    if not name or not name.strip():
        raise RenderError("Playlist has no name to derive a filename from")
    return re.sub(r"[^a-z0-9]+", "_", name, flags=re.IGNORECASE).lower()


def csv_filename(name: str | None) -> str:
    try:
        return f"{sanitize_filename(name)}.csv"
    except RenderError as e:
        logger.warning("%s; using %s.csv", e, FALLBACK_FILENAME)
        return f"{FALLBACK_FILENAME}.csv"


def _parse_accept(accept: str) -> list[tuple[str, str, float]]:
    """(type, subtype, q) per media range. Malformed q counts as 0."""
    ranges = []
    for part in accept.split(","):
        part = part.strip()
        if not part:
            continue
        media, *params = [p.strip() for p in part.split(";")]
        maintype, _, subtype = media.lower().partition("/")
        q = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        ranges.append((maintype, subtype or "*", q))
    return ranges


def _quality(ranges: list[tuple[str, str, float]], maintype: str, subtype: str) -> float:
    """q of the most specific range matching maintype/subtype."""
    best_specificity = -1
    best_q = 0.0
    for r_type, r_sub, q in ranges:
        if r_type == maintype and r_sub == subtype:
            specificity = 2
        elif r_type == maintype and r_sub == "*":
            specificity = 1
        elif r_type == "*" and r_sub == "*":
            specificity = 0
        else:
            continue
        if specificity > best_specificity:
            best_specificity, best_q = specificity, q
    return best_q


def negotiate(accept: str | None) -> str | None:
    """
    Pick HTML or JSON for an Accept header. Absent header means HTML.
    None when neither is acceptable (caller answers 406).
    """
    if not accept or not accept.strip():
        return HTML
    ranges = _parse_accept(accept)
    best, best_q = None, 0.0
    for name, maintype, subtype in _OFFERS:
        q = _quality(ranges, maintype, subtype)
        if q > best_q:
            best, best_q = name, q
    return best
