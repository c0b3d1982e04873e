import pytest

from hangar.exceptions import ConfigurationError
from hangar.references import (
    ById,
    ByName,
    BySelector,
    is_possibly_id,
    parse_id_list,
    parse_id_or_selector,
    parse_image,
)

pytestmark = [pytest.mark.unit, pytest.mark.xdist_group("unit")]


class TestParseImage:
    def test_name_is_literal(self):
        assert parse_image("ubuntu-24.04") == ByName("ubuntu-24.04")

    def test_numeric_id_is_literal(self):
        assert parse_image("67794396") == ByName("67794396")

    def test_label_expression(self):
        assert parse_image("type=ubuntu") == BySelector("type=ubuntu")


class TestParseIdOrSelector:
    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_is_unset(self, value):
        assert parse_id_or_selector(value) is None

    def test_non_negative_integer_is_id(self):
        assert parse_id_or_selector("12345") == ById(12345)
        assert parse_id_or_selector("0") == ById(0)

    @pytest.mark.parametrize("value", ["env=prod", "-1", "12a", "my-network", "1.5"])
    def test_anything_else_is_selector(self, value):
        assert parse_id_or_selector(value) == BySelector(value)


class TestIsPossiblyId:
    def test_rejects_unicode_digits(self):
        assert not is_possibly_id("²")

    def test_rejects_whitespace(self):
        assert not is_possibly_id(" 1")


class TestParseIdList:
    def test_comma_separated(self):
        assert parse_id_list("1,2, 3") == [1, 2, 3]

    def test_skips_empty_entries(self):
        assert parse_id_list("1,,2,") == [1, 2]

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value):
        assert parse_id_list(value) == []

    def test_invalid_entry(self):
        with pytest.raises(ConfigurationError, match="vol-a"):
            parse_id_list("1,vol-a")


class TestNonTextValues:
    @pytest.mark.parametrize("parse", [parse_id_or_selector, parse_id_list])
    @pytest.mark.parametrize("value", [12345, 1.5, [5]])
    def test_rejected_as_configuration_error(self, parse, value):
        with pytest.raises(ConfigurationError, match="as text"):
            parse(value)
