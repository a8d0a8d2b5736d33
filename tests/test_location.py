"""Tests for lookup-location resolution."""

from pipeline.location import admin_token, resolve_location
from schemas import SummonsRecord


def record(**fields):
    return SummonsRecord(raw_text="传票", **fields)


def test_court_name_wins():
    assert resolve_location(
        record(court=" 南京市鼓楼区人民法院 ", court_address="江苏省南京市鼓楼区中山路1号")
    ) == "南京市鼓楼区人民法院"


def test_address_token_skips_province():
    assert resolve_location(record(court_address="江苏省南京市鼓楼区中山路1号")) == "南京市"


def test_address_without_admin_token_uses_first_segment():
    assert resolve_location(record(court_address="中山路1号，二楼")) == "中山路1号"


def test_summoned_person_fallback():
    assert resolve_location(record(court="", court_address="  ", summoned_person="张三")) == "张三"


def test_nothing_usable():
    assert resolve_location(record()) == ""


def test_admin_token():
    assert admin_token("北京市第一中级人民法院") == "北京市"
    assert admin_token("中山路1号") is None


def test_city_ending_in_zhou_keeps_full_token():
    assert resolve_location(record(court_address="浙江省杭州市西湖区文三路1号")) == "杭州市"
    assert admin_token("广州市天河区") == "广州市"


def test_province_name_containing_zhou():
    assert resolve_location(record(court_address="贵州省贵阳市云岩区中华北路")) == "贵阳市"


def test_autonomous_region_prefix():
    assert resolve_location(record(court_address="广西壮族自治区南宁市青秀区民族大道")) == "南宁市"


def test_province_character_inside_street_name():
    assert resolve_location(record(court_address="南京市鼓楼区省府路8号")) == "南京市"
    assert admin_token("鼓楼区省府路8号") == "鼓楼区"
