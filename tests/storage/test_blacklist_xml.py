from signage_client.storage.blacklist import BlacklistStore
from signage_client.storage.blacklist_xml import load_blacklist_xml, parse_blacklist_xml

DOCUMENT = """<?xml version="1.0" encoding="UTF-8"?>
<blacklist>
  <file id="5" type="media"/>
  <file type="media"/>
  <file id="7" type="media"/>
</blacklist>
"""


def test_parse_returns_elements_with_ids():
    nodes = parse_blacklist_xml(DOCUMENT)

    assert [node.get("id") for node in nodes] == ["5", "7"]


def test_invalid_xml_yields_nothing():
    assert parse_blacklist_xml("<blacklist><file id=") == []


def test_missing_file_yields_nothing(tmp_path):
    assert load_blacklist_xml(tmp_path / "nope.xml") == []


def test_import_xml_into_store(tmp_path, blacklist_path):
    source = tmp_path / "cms_blacklist.xml"
    source.write_text(DOCUMENT, encoding="utf-8")
    store = BlacklistStore(blacklist_path)

    added = store.add_bulk(load_blacklist_xml(source))

    assert added == 2
    assert store.is_blacklisted("5")
    assert store.is_blacklisted("7")
