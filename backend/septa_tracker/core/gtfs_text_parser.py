"""Parser for SEPTA's GTFS-realtime "print.php" page.

The page is the protobuf text format of a ``FeedMessage`` wrapped in HTML::

    <pre>
    header {<br>
      gtfs_realtime_version: "2.0"<br>
    }<br>
    entity {<br>
      id: "1001"<br>
      vehicle {<br>
        trip { route_id: "BSL" direction_id: 0 }<br>
        vehicle { id: "1001" label: "1001" }<br>
        position { latitude: 39.95 longitude: -75.16 }<br>
        stop_id: "BSL_CITY_HALL"<br>
      }<br>
    }<br>
    </pre>

Once the HTML is stripped the body is handed to protobuf's text format
parser, so nested ``vehicle`` blocks bind to the right message type.
"""

import html
import logging
import re

from google.protobuf import text_format
from google.transit import gtfs_realtime_pb2

logger = logging.getLogger(__name__)

_PRE_RE = re.compile(r"<pre[^>]*>(.*?)</pre>", re.IGNORECASE | re.DOTALL)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)


def extract_payload(text: str) -> str | None:
    """Return the <pre> body with <br> tags turned into newlines, or None."""
    match = _PRE_RE.search(text)
    if not match:
        return None
    return html.unescape(_BR_RE.sub("\n", match.group(1)))


def parse_feed(text: str) -> gtfs_realtime_pb2.FeedMessage:
    """Parse a print.php page. Malformed input yields an empty feed."""
    feed = gtfs_realtime_pb2.FeedMessage()
    payload = extract_payload(text)
    if payload is None:
        logger.debug("GTFS-RT page has no <pre> block")
        return feed

    try:
        text_format.Parse(
            payload,
            feed,
            allow_unknown_extension=True,
            allow_unknown_field=True,
        )
    except text_format.ParseError as e:
        logger.warning("Could not parse GTFS-RT text dump: %s", e)
        return gtfs_realtime_pb2.FeedMessage()
    return feed


def parse(text: str) -> list[gtfs_realtime_pb2.FeedEntity]:
    """Entities of a print.php page; entities without an id are skipped."""
    entities = []
    for entity in parse_feed(text).entity:
        if not entity.id:
            logger.debug("Skipping GTFS-RT entity without id")
            continue
        entities.append(entity)
    return entities
