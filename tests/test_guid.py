import pytest

from systdecode.guid import Guid

SAMPLE = "{00112233-4455-6677-8899-aabbccddeeff}"


def test_parse_bytes_in_text_order():
    guid = Guid.parse(SAMPLE)
    assert guid.to_bytes() == bytes.fromhex(SAMPLE.strip("{}").replace("-", ""))


def test_str_round_trip():
    assert str(Guid.parse(SAMPLE)) == SAMPLE


def test_str_is_lower_case():
    text = "{FFFFFFFF-FFFF-FFFF-FFFF-FFFFFFFFFFFF}"
    assert str(Guid.parse(text)) == text.lower()


def test_bytes_round_trip():
    raw = bytes(range(16))
    assert Guid.from_bytes(raw).to_bytes() == raw
    assert Guid.parse(str(Guid.from_bytes(raw))) == Guid.from_bytes(raw)


def test_from_bytes_uses_first_sixteen():
    raw = bytes(range(20))
    assert Guid.from_bytes(raw).to_bytes() == raw[:16]


def test_from_bytes_too_short():
    with pytest.raises(ValueError):
        Guid.from_bytes(bytes(8))


@pytest.mark.parametrize(
    "text",
    [
        "00112233-4455-6677-8899-aabbccddeeff",
        "{00112233-4455-6677-8899-aabbccddeeff",
        "{00112233_4455-6677-8899-aabbccddeeff}",
        "{zz112233-4455-6677-8899-aabbccddeeff}",
        "",
    ],
)
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        Guid.parse(text)


def test_default_is_zero():
    assert Guid().to_bytes() == bytes(16)


def test_and_masks_bytes():
    guid = Guid.parse(SAMPLE)
    assert guid & Guid(bytes(16)) == Guid()
    assert guid & Guid(b"\xff" * 16) == guid


def test_ordering_uses_little_endian_words():
    low = Guid(b"\x01" + bytes(15))
    high = Guid(bytes(7) + b"\x01" + bytes(8))
    assert low < high
    assert not high < low
    assert sorted([high, low]) == [low, high]


def test_ordering_second_word_breaks_ties():
    a = Guid(bytes(8) + b"\x01" + bytes(7))
    b = Guid(bytes(15) + b"\x01")
    assert a < b


def test_hashable_and_equal():
    assert {Guid.parse(SAMPLE): 1}[Guid.parse(SAMPLE)] == 1