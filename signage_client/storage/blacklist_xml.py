from __future__ import annotations

from pathlib import Path
from typing import List, Union
from xml.etree import ElementTree

from signage_client.monitoring.structured_logger import log_error


def parse_blacklist_xml(text: Union[str, bytes]) -> List[ElementTree.Element]:
    """
    Parse a CMS blacklist document, e.g.

        <blacklist><file id="5" type="media"/><file id="7" type="media"/></blacklist>

    and return the child elements that carry an id attribute.
    """
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as e:
        log_error("blacklist.xml.invalid", f"Cannot parse blacklist XML: {e}")
        return []
    return [node for node in root.iter() if node is not root and node.get("id") is not None]


def load_blacklist_xml(path: Union[str, Path]) -> List[ElementTree.Element]:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        log_error("blacklist.xml.read_failed", f"Cannot read {path}", context={"error": str(e)})
        return []
    return parse_blacklist_xml(data)
