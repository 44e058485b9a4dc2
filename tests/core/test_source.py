from pathlib import Path

import pytest

from govmocks.core.exceptions import ConfigParseError, SourceNotFoundError
from govmocks.core.source import (
    ConfigEntry,
    entries_from_mapping,
    parse_overrides,
    read_path,
    read_source,
)


def test_parses_assignments_in_order():
    entries = parse_overrides(
        """
a.b = "one"
a.c = true
a.d = false
"""
    )

    assert [(e.key_path, e.value) for e in entries] == [
        (("a", "b"), "one"),
        (("a", "c"), True),
        (("a", "d"), False),
    ]


def test_comments_and_blank_lines_are_skipped():
    entries = parse_overrides(
        """
# hash comment
// slash comment

   # indented comment
key.path = "value"  # trailing comment
"""
    )

    assert len(entries) == 1
    assert entries[0].value == "value"
    assert entries[0].line == 6


def test_section_header_prefixes_keys():
    entries = parse_overrides(
        """
[openid_connect.settings.generic]
enabled = true
settings.client_id = "aabenforms-backend"

[]
top = "level"
"""
    )

    assert [e.dotted_path for e in entries] == [
        "openid_connect.settings.generic.enabled",
        "openid_connect.settings.generic.settings.client_id",
        "top",
    ]


def test_section_header_may_carry_a_trailing_comment():
    entries = parse_overrides(
        """
[serviceplatformen.settings]  # CPR mocks
cpr_endpoint = "http://localhost:8081/soap/sf1520"
[openid_connect.settings.generic] // Keycloak
enabled = false
"""
    )

    assert [e.dotted_path for e in entries] == [
        "serviceplatformen.settings.cpr_endpoint",
        "openid_connect.settings.generic.enabled",
    ]


def test_duplicates_are_kept_for_the_registry_to_resolve():
    entries = parse_overrides('a = "first"\na = "second"\n')

    assert [e.value for e in entries] == ["first", "second"]


def test_literal_strings_and_inline_tables():
    entries = parse_overrides(
        """
a.path = 'C:\\no\\escapes'
a.table = { client_id = "x", enabled = true }
a.empty = {}
"""
    )

    values = {e.dotted_path: e.value for e in entries}
    assert values["a.path"] == "C:\\no\\escapes"
    assert values["a.table"] == {"client_id": "x", "enabled": True}
    assert values["a.empty"] == {}


def test_windows_line_endings():
    entries = parse_overrides('a = "x"\r\nb = "y"\r\n')

    assert [(e.dotted_path, e.value) for e in entries] == [("a", "x"), ("b", "y")]


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("just some words", "Expected 'key = value'"),
        ("a.b =", "Missing value"),
        ('a..b = "x"', "Invalid key path segment"),
        ("a = unquoted", "Invalid value"),
        ('a = "unterminated', "Invalid value"),
        ("[a.b", "Unterminated section header"),
        ("[a b]", "Invalid key path segment"),
        ("[a.b] c = 1", "Unexpected text after section header"),
        ("port = 8080", "Unsupported value type int"),
        ("ratio = 1.5", "Unsupported value type float"),
        ('list = ["a", "b"]', "Unsupported value type list"),
        ("a = { port = 8080 }", "Unsupported value type int"),
    ],
)
def test_malformed_lines_raise_parse_error(text, message):
    with pytest.raises(ConfigParseError, match=message):
        parse_overrides(text, source_name="site.overrides")


def test_parse_error_reports_source_and_line():
    with pytest.raises(ConfigParseError) as exc_info:
        parse_overrides('ok = "fine"\n\nbroken line\n', source_name="site.overrides")

    assert exc_info.value.source == "site.overrides"
    assert exc_info.value.line == 3
    assert str(exc_info.value).startswith("site.overrides:3: ")


def test_entries_from_mapping_flattens_and_splits_dotted_keys():
    entries = entries_from_mapping(
        {
            "serviceplatformen.settings": {"cpr_endpoint": "http://localhost:8081/soap/sf1520"},
            "flag": True,
            "empty": {},
        }
    )

    assert entries == [
        ConfigEntry(("serviceplatformen", "settings", "cpr_endpoint"), "http://localhost:8081/soap/sf1520"),
        ConfigEntry(("flag",), True),
        ConfigEntry(("empty",), {}),
    ]


def test_entries_from_mapping_rejects_unsupported_values():
    with pytest.raises(ConfigParseError, match="Unsupported value type int"):
        entries_from_mapping({"port": 8080})


def test_entries_from_mapping_rejects_non_string_keys():
    with pytest.raises(ConfigParseError):
        entries_from_mapping({1: "x"})


def test_read_yaml_file(tmp_path: Path):
    path = tmp_path / "overrides.yml"
    path.write_text(
        "openid_connect.settings.generic:\n"
        "  enabled: false\n"
        "  settings:\n"
        "    client_id: aabenforms-backend\n",
        encoding="utf-8",
    )

    entries = read_path(path)

    assert {e.dotted_path: e.value for e in entries} == {
        "openid_connect.settings.generic.enabled": False,
        "openid_connect.settings.generic.settings.client_id": "aabenforms-backend",
    }


def test_read_toml_file(tmp_path: Path):
    path = tmp_path / "overrides.toml"
    path.write_text(
        '[serviceplatformen.settings]\ncvr_endpoint = "http://localhost:8081/soap/sf1530"\n',
        encoding="utf-8",
    )

    entries = read_path(path)

    assert [(e.dotted_path, e.value) for e in entries] == [
        ("serviceplatformen.settings.cvr_endpoint", "http://localhost:8081/soap/sf1530"),
    ]


def test_empty_yaml_file_has_no_entries(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert read_path(path) == []


def test_invalid_yaml(tmp_path: Path):
    path = tmp_path / "broken.yml"
    path.write_text("a: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigParseError, match="Invalid YAML"):
        read_path(path)


def test_invalid_toml(tmp_path: Path):
    path = tmp_path / "broken.toml"
    path.write_text("invalid = [", encoding="utf-8")

    with pytest.raises(ConfigParseError, match="Invalid TOML"):
        read_path(path)


def test_yaml_root_must_be_a_mapping(tmp_path: Path):
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigParseError, match="Configuration root must be a mapping"):
        read_path(path)


def test_missing_file(tmp_path: Path):
    with pytest.raises(SourceNotFoundError):
        read_path(tmp_path / "nope.overrides")


def test_non_utf8_override_file(tmp_path: Path):
    path = tmp_path / "latin1.overrides"
    path.write_bytes('name = "S\xf8ren"\n'.encode("latin-1"))

    with pytest.raises(ConfigParseError, match="not valid UTF-8"):
        read_path(path)


@pytest.mark.parametrize("name", ["latin1.toml", "latin1.yaml"])
def test_non_utf8_mapping_file(tmp_path: Path, name: str):
    path = tmp_path / name
    path.write_bytes(b'a = "\xff\xfe"\n' if name.endswith(".toml") else b"a: \xff\xfe\n")

    with pytest.raises(ConfigParseError, match="not valid UTF-8"):
        read_path(path)


def test_read_source_dispatches_on_type(write_source):
    path = write_source('a = "from file"\n')

    assert read_source(path)[0].value == "from file"
    assert read_source('a = "from text"')[0].value == "from text"
    assert read_source({"a": "from mapping"})[0].value == "from mapping"


def test_read_source_rejects_other_types():
    with pytest.raises(TypeError):
        read_source(42)  # type: ignore[arg-type]
