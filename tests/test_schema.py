import pytest

from pyoptstore.errors import ConfigurationError
from pyoptstore.messages import MessageSink
from pyoptstore.schema import SchemaEntry, coerce_schema, normalize_key, run_pipeline


def trim(value, emit):
    stripped = value.strip()
    if stripped != value:
        emit("Surrounding whitespace removed")
    return stripped


def required(value, emit):
    if not value:
        emit("A value is required")
        return False
    return True


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("title", "title"),
        ("  Site_Title ", "site_title"),
        ("Max-Items!", "max-items"),
        ("a b", "ab"),
    ],
)
def test_normalize_key(raw, expected):
    assert normalize_key(raw) == expected


@pytest.mark.parametrize("bad", ["", "   ", "!!!", 5])
def test_normalize_key_rejects(bad):
    with pytest.raises(ConfigurationError):
        normalize_key(bad)


def test_coerce_schema_normalizes_keys_and_rules():
    schema = coerce_schema({" Title ": {"default": "x", "sanitize": trim, "validate": [required]}})
    entry = schema["title"]
    assert entry.has_default and entry.default == "x"
    assert len(entry.sanitize) == 1
    assert len(entry.validate) == 1


@pytest.mark.parametrize(
    "schema",
    [
        {"a": "not a mapping"},
        {"a": {"sanitize": "strip"}},
        {"a": {"validate": [required, 3]}},
        {"a": {"defualt": 1}},
    ],
)
def test_coerce_schema_rejects_bad_entries(schema):
    with pytest.raises(ConfigurationError):
        coerce_schema(schema)


def test_callable_default_is_resolved_freshly():
    entry = coerce_schema({"tags": {"default": list}})["tags"]
    first = entry.resolve_default()
    assert first == []
    assert entry.resolve_default() is not first


def test_entry_without_default():
    entry = coerce_schema({"a": {}})["a"]
    assert entry == SchemaEntry()
    assert entry.has_default is False


def test_pipeline_collects_notice_and_warning():
    entry = coerce_schema({"title": {"sanitize": [trim], "validate": [required]}})["title"]
    sink = MessageSink()
    result = run_pipeline("title", "   ", entry, sink)
    assert result.ok is False
    assert result.value == ""
    assert sink.notices_for("title") == ["Surrounding whitespace removed"]
    assert sink.warnings_for("title") == ["A value is required"]


def test_pipeline_default_warning_and_short_circuit():
    calls = []

    def never(value, emit):
        calls.append(value)
        return True

    entry = coerce_schema({"n": {"validate": [lambda v, emit: v > 0, never]}})["n"]
    sink = MessageSink()
    assert run_pipeline("n", -1, entry, sink) == (False, -1)
    assert sink.warnings_for("n") == ["Validation failed for value -1"]
    assert calls == []
    assert run_pipeline("n", 3, entry, sink) == (True, 3)
    assert calls == [3]


def test_single_argument_rules_are_supported():
    entry = coerce_schema({"name": {"sanitize": [str.strip, str.lower], "validate": bool}})["name"]
    sink = MessageSink()
    assert run_pipeline("name", "  Ada ", entry, sink) == (True, "ada")


def test_non_idempotent_sanitizer_raises():
    entry = coerce_schema({"x": {"sanitize": lambda v, emit: v + "!"}})["x"]
    with pytest.raises(ConfigurationError):
        run_pipeline("x", "hi", entry, MessageSink())


def test_non_bool_validator_raises():
    entry = coerce_schema({"x": {"validate": lambda v, emit: 1}})["x"]
    with pytest.raises(ConfigurationError):
        run_pipeline("x", "hi", entry, MessageSink())
