"""Tests for the /getProdStats payload decoder."""

import pytest

from prodexporter.collector.payload_decoder import (
    decode_production_details,
    strip_trailing_commas,
)
from prodexporter.errors import DecodeError

IRON_ORE = (
    b'[{"itemName":"IronOre","productionCapacity":60,"productionPercent":100,'
    b'"consumptionCapacity":0,"consumptionPercent":0,"currentProduction":60,'
    b'"currentConsumption":0}]'
)


def test_decodes_single_record():
    details = decode_production_details(IRON_ORE)
    assert len(details) == 1

    d = details[0]
    assert d.item_name == "IronOre"
    assert d.production_capacity == 60.0
    assert d.production_percent == 100.0
    assert d.consumption_capacity == 0.0
    assert d.consumption_percent == 0.0
    assert d.current_production == 60.0
    assert d.current_consumption == 0.0


def test_field_names_are_case_insensitive():
    payload = '[{"ITEMNAME":"Screw","ProductionCapacity":160,"currentconsumption":12.5}]'
    d = decode_production_details(payload)[0]
    assert d.item_name == "Screw"
    assert d.production_capacity == 160.0
    assert d.current_consumption == 12.5


def test_trailing_commas_tolerated():
    payload = '[{"itemName":"IronRod","currentProduction":45,},{"itemName":"IronPlate",},]'
    details = decode_production_details(payload)
    assert [d.item_name for d in details] == ["IronRod", "IronPlate"]
    assert details[0].current_production == 45.0


def test_commas_inside_strings_untouched():
    text = '[{"itemName":"a,]","x":"\\",}"},]'
    assert strip_trailing_commas(text) == '[{"itemName":"a,]","x":"\\",}"}]'


def test_unknown_fields_ignored():
    payload = '[{"itemName":"Coal","currentProduction":30,"isFavourite":true,"location":{"x":1}}]'
    d = decode_production_details(payload)[0]
    assert d.item_name == "Coal"
    assert d.current_production == 30.0


def test_missing_numeric_fields_are_none():
    d = decode_production_details('[{"itemName":"Coal","currentProduction":30}]')[0]
    assert d.current_production == 30.0
    assert d.production_capacity is None
    assert d.consumption_percent is None


def test_null_numeric_field_is_none():
    d = decode_production_details('[{"itemName":"Coal","productionPercent":null}]')[0]
    assert d.production_percent is None


def test_quoted_numbers_rejected():
    with pytest.raises(DecodeError):
        decode_production_details('[{"itemName":"Coal","productionCapacity":"120.5"}]')


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", '"Infinity"', '"NaN"', "1e400"])
def test_non_finite_numbers_rejected(literal):
    payload = '[{"itemName":"Coal","productionCapacity":%s}]' % literal
    with pytest.raises(DecodeError):
        decode_production_details(payload)


def test_integer_too_large_for_float_rejected():
    payload = '[{"itemName":"Coal","productionCapacity":1%s}]' % ("0" * 400)
    with pytest.raises(DecodeError, match="out of range"):
        decode_production_details(payload)


def test_integer_past_digit_limit_rejected():
    payload = '[{"itemName":"Coal","productionCapacity":%s}]' % ("9" * 5000)
    with pytest.raises(DecodeError):
        decode_production_details(payload)


def test_preserves_payload_order():
    payload = '[{"itemName":"C"},{"itemName":"A"},{"itemName":"B"}]'
    assert [d.item_name for d in decode_production_details(payload)] == ["C", "A", "B"]


def test_empty_array():
    assert decode_production_details(b"[]") == []


def test_utf8_bom_accepted():
    details = decode_production_details(b"\xef\xbb\xbf" + IRON_ORE)
    assert details[0].item_name == "IronOre"


@pytest.mark.parametrize("payload", [
    b"not json",
    b"",
    b'{"itemName":"IronOre"}',
    b'["IronOre"]',
    b'[{"productionCapacity":60}]',
    b'[{"itemName":42}]',
    b'[{"itemName":"IronOre","productionCapacity":"lots"}]',
    b'[{"itemName":"IronOre","productionCapacity":true}]',
    b'[{"itemName":"IronOre","productionCapacity":[60]}]',
    b"\xff\xfe\x00",
])
def test_malformed_payload_raises(payload):
    with pytest.raises(DecodeError):
        decode_production_details(payload)


def test_one_bad_record_fails_whole_payload():
    payload = '[{"itemName":"Good","currentProduction":1},{"itemName":"Bad","currentProduction":"x"}]'
    with pytest.raises(DecodeError, match="record 1"):
        decode_production_details(payload)
