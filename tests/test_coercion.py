"""Tests for ahatconfig.config.coercion"""

import pytest

from ahatconfig.config import FieldKind, coerce, coerce_list, coerce_scalar, get_schema, is_zero, new_record, zero_value
from ahatconfig.exceptions import CoercionError, ConfigurationError
from sample_config import AppConfig, Database, Mixed, Server, Untagged


class TestCoerceScalar:
    """Tests for single-value coercion"""

    def test_string_identity(self):
        assert coerce_scalar(" spaced ", FieldKind.STRING, "f") == " spaced "

    @pytest.mark.parametrize("raw,expected", [("42", 42), ("-7", -7), ("+3", 3), (" 8 ", 8)])
    def test_integer(self, raw, expected):
        assert coerce_scalar(raw, FieldKind.INTEGER, "f") == expected

    @pytest.mark.parametrize("raw", ["4.2", "abc", "1e3", "0x10", "\u0663", "1_000"])
    def test_integer_rejects(self, raw):
        with pytest.raises(CoercionError) as exc_info:
            coerce_scalar(raw, FieldKind.INTEGER, "port")
        assert exc_info.value.field == "port"
        assert exc_info.value.raw_value == raw
        assert exc_info.value.target_type == "integer"

    def test_float(self):
        assert coerce_scalar("2.5", FieldKind.FLOAT, "f") == 2.5
        assert coerce_scalar("3", FieldKind.FLOAT, "f") == 3.0

    def test_float_rejects(self):
        with pytest.raises(CoercionError):
            coerce_scalar("fast", FieldKind.FLOAT, "f")

    @pytest.mark.parametrize("raw,expected", [("true", True), ("TRUE", True), ("False", False)])
    def test_boolean(self, raw, expected):
        assert coerce_scalar(raw, FieldKind.BOOLEAN, "f") is expected

    @pytest.mark.parametrize("raw", ["yes", "1", "on"])
    def test_boolean_rejects(self, raw):
        with pytest.raises(CoercionError):
            coerce_scalar(raw, FieldKind.BOOLEAN, "enabled")

    @pytest.mark.parametrize(
        "kind,zero",
        [(FieldKind.STRING, ""), (FieldKind.INTEGER, 0), (FieldKind.FLOAT, 0.0), (FieldKind.BOOLEAN, False)],
    )
    def test_empty_yields_zero(self, kind, zero):
        assert coerce_scalar("", kind, "f") == zero


class TestCoerceList:
    """Tests for comma separated lists"""

    def test_trims_and_drops_empty(self):
        assert coerce_list(" a, b ,,c , ", FieldKind.STRING, "f") == ["a", "b", "c"]

    def test_typed_elements(self):
        assert coerce_list("1, 2,3", FieldKind.INTEGER, "f") == [1, 2, 3]
        assert coerce_list("true,FALSE", FieldKind.BOOLEAN, "f") == [True, False]

    def test_empty_input(self):
        assert coerce_list("", FieldKind.INTEGER, "f") == []
        assert coerce_list(" , ,", FieldKind.INTEGER, "f") == []

    def test_bad_element(self):
        with pytest.raises(CoercionError) as exc_info:
            coerce_list("1,two,3", FieldKind.INTEGER, "ports")
        assert exc_info.value.raw_value == "two"


class TestCoerceField:
    """Tests for descriptor-driven coercion"""

    def test_scalar_field(self):
        port = get_schema(Server).field_named("port")
        assert coerce("9090", port) == 9090

    def test_list_field(self):
        hosts = get_schema(Database).field_named("hosts")
        assert coerce("h1, h2", hosts) == ["h1", "h2"]

    def test_unsupported_field(self):
        extra = get_schema(Mixed).field_named("extra")
        with pytest.raises(ConfigurationError) as exc_info:
            coerce("x", extra)
        assert exc_info.value.code == "UNSUPPORTED_FIELD_TYPE"

    def test_record_field_cannot_be_coerced(self):
        server = get_schema(AppConfig).field_named("server")
        with pytest.raises(ConfigurationError):
            coerce("x", server)


class TestZeroValues:
    """Tests for the zero-value policy"""

    @pytest.mark.parametrize("value", ["", 0, 0.0, False, [], None])
    def test_zero(self, value):
        assert is_zero(value)

    @pytest.mark.parametrize("value", ["x", 1, -1, 0.5, True, ["a"]])
    def test_non_zero(self, value):
        assert not is_zero(value)

    def test_record_zero_when_all_fields_zero(self):
        assert is_zero(Server(host="", port=0))
        assert not is_zero(Server(host="", port=1))

    def test_zero_value_per_kind(self):
        schema = get_schema(AppConfig)
        assert zero_value(schema.field_named("enabled")) is False
        assert zero_value(schema.field_named("users")) == []
        assert zero_value(schema.field_named("server")) == Server(host="", port=0)

    def test_new_record_nested(self):
        config = new_record(AppConfig)
        assert config.server == Server(host="", port=0)
        assert config.database.hosts == []
        assert config.users == []
        assert config.enabled is False

    def test_new_record_keeps_dataclass_defaults(self):
        record = new_record(Untagged)
        assert record.name == ""
        assert record.retries == 3
        assert record.tags == []

    def test_new_record_lists_not_shared(self):
        first = new_record(Database)
        second = new_record(Database)
        first.hosts.append("x")
        assert second.hosts == []
