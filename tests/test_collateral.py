import xml.etree.ElementTree as ET

import pytest

from systdecode.collateral import (
    CatalogEntry,
    Collateral,
    MaskedItem,
    MaskedVector,
    parse_xml,
)
from systdecode.guid import Guid

GUID_TEXT = "{494e5443-8a9c-4014-a65a-2f36a36d96e4}"
OTHER_GUID_TEXT = "{11111111-2222-3333-4444-555555555555}"

SAMPLE = f"""<?xml version="1.0" encoding="utf-8"?>
<syst:Collateral xmlns:syst="http://www.example.com/syst-collateral">
  <syst:Client Name="example_client">
    <syst:Guids>
      <syst:Guid ID="{GUID_TEXT}" Mask="{{ffffffff-ffff-ffff-ffff-ffffffffffff}}">example</syst:Guid>
    </syst:Guids>
    <syst:Builds>
      <syst:Build ID="0x1000">build one</syst:Build>
    </syst:Builds>
    <syst:SourceFiles>
      <syst:File ID="1">main.c</syst:File>
    </syst:SourceFiles>
    <syst:Modules>
      <syst:Module ID="2">module_two</syst:Module>
    </syst:Modules>
    <syst:Catalog32>
      <syst:Format ID="0x1" File="1" Line="42">hello %d</syst:Format>
    </syst:Catalog32>
    <syst:Catalog64>
      <syst:Format ID="0x1122334455667788">wide %s</syst:Format>
    </syst:Catalog64>
    <syst:Short32>
      <syst:Format ID="0x100" Mask="0xF00">short %x</syst:Format>
    </syst:Short32>
    <syst:Write>
      <syst:Protocol ID="5">proto%d</syst:Protocol>
    </syst:Write>
  </syst:Client>
</syst:Collateral>
"""


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "collateral.xml"
    path.write_text(SAMPLE)
    return str(path)


@pytest.fixture
def coll(sample_file):
    (result,) = parse_xml(sample_file)
    return result


def test_parse_name_and_file(coll, sample_file):
    assert coll.name == "example_client"
    assert coll.file_name == sample_file


def test_match_guid(coll):
    assert coll.match(Guid.parse(GUID_TEXT), 0)
    assert not coll.match(Guid.parse(OTHER_GUID_TEXT), 0)


def test_match_build(coll):
    guid = Guid.parse(GUID_TEXT)
    assert coll.match(guid, 0x1000)
    assert not coll.match(guid, 0x2000)


def test_catalog_entry_with_position(coll):
    entry = coll.catalog_entry(0x1, 32)
    assert entry.msg == "hello %d"
    assert (entry.file, entry.line) == (1, 42)
    assert coll.catalog_entry(0x2, 32) is None


def test_catalog64_entry(coll):
    assert coll.catalog_entry(0x1122334455667788, 64).msg == "wide %s"
    assert coll.catalog_entry(0x1122334455667788, 32) is None


def test_short_entry_uses_mask(coll):
    entry = coll.short_entry(0x1AB, 32)
    assert entry.msg == "short %x"
    assert entry.mask == 0xF00
    assert coll.short_entry(0x2AB, 32) is None


def test_source_file_and_write_type(coll):
    assert coll.source_file(1) == "main.c"
    assert coll.source_file(9) is None
    assert coll.write_type(5) == "proto%d"
    assert coll.write_type(6) is None


def test_modules(coll):
    assert coll.modules.find(2).value == "module_two"


def test_from_element_directly():
    root = ET.fromstring(SAMPLE.split("\n", 1)[1])
    client = next(iter(root))
    result = Collateral.from_element(client, "inline.xml")
    assert result.file_name == "inline.xml"
    assert result.source_file(1) == "main.c"


def test_masked_vector_find_and_add():
    vec = MaskedVector()
    vec.add(MaskedItem(0x10, 0xF0, "a"))
    vec.add(MaskedItem(0x20, 0xFF, "b"))
    assert vec.find(0x1F).value == "a"
    assert vec.find(0x20).value == "b"
    assert vec.find(0x21) is None
    assert len(vec) == 2


def test_masked_vector_overwrites_different_value(capsys):
    vec = MaskedVector()
    vec.add(MaskedItem(1, 0xFF, CatalogEntry("old", 0xFF)))
    vec.add(MaskedItem(1, 0xFF, CatalogEntry("new", 0xFF)))
    assert len(vec) == 1
    assert vec.find(1).value.msg == "new"
    assert "Overwriting" in capsys.readouterr().err


def test_duplicate_in_file_last_wins(tmp_path):
    text = SAMPLE.replace(
        '<syst:File ID="1">main.c</syst:File>',
        '<syst:File ID="1">main.c</syst:File><syst:File ID="1">other.c</syst:File>',
    )
    path = tmp_path / "dup.xml"
    path.write_text(text)
    (result,) = parse_xml(str(path))
    assert result.source_file(1) == "other.c"


def test_malformed_id_raises(tmp_path):
    path = tmp_path / "bad.xml"
    path.write_text(SAMPLE.replace('ID="0x1" File', 'ID="zz" File'))
    with pytest.raises(ValueError, match="Malformed"):
        parse_xml(str(path))


def test_malformed_line_raises(tmp_path):
    path = tmp_path / "bad.xml"
    path.write_text(SAMPLE.replace('Line="42"', 'Line="x42"'))
    with pytest.raises(ValueError, match="Line attribute"):
        parse_xml(str(path))


def test_malformed_guid_raises(tmp_path):
    path = tmp_path / "bad.xml"
    path.write_text(SAMPLE.replace(GUID_TEXT, "{not-a-guid}"))
    with pytest.raises(ValueError):
        parse_xml(str(path))


def test_invalid_xml_raises(tmp_path):
    path = tmp_path / "broken.xml"
    path.write_text("<syst:Collateral")
    with pytest.raises(ValueError, match="XML parser error"):
        parse_xml(str(path))


def test_missing_file_raises(tmp_path):
    with pytest.raises(ValueError, match="XML parser error"):
        parse_xml(str(tmp_path / "absent.xml"))


def test_other_root_gives_no_collaterals(tmp_path):
    path = tmp_path / "other.xml"
    path.write_text("<Something><Client Name='x'/></Something>")
    assert parse_xml(str(path)) == []