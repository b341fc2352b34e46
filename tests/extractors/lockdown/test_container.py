"""Tests for the outer Lockdown container reader."""

import plistlib

import pytest

from extractors.exceptions import (
    ContainerReadError,
    FieldTypeError,
    MissingFieldError,
    PlistFormatError,
)
from extractors.lockdown.container import (
    ITEMS_KEY,
    default_container_path,
    extract_items_blob,
    parse_container,
    read_container,
)


def test_read_container_returns_nested_blob(archive_builder, write_container):
    archive_builder.item()
    path = write_container(archive_builder)

    assert read_container(path) == archive_builder.to_bytes()


def test_binary_container(tmp_path, archive_builder):
    path = tmp_path / "binary.plist"
    path.write_bytes(archive_builder.container_bytes(fmt=plistlib.FMT_BINARY))
    assert read_container(str(path)) == archive_builder.to_bytes()


def test_missing_file(tmp_path):
    with pytest.raises(ContainerReadError, match="missing.plist"):
        read_container(tmp_path / "missing.plist")


def test_directory_is_not_readable(tmp_path):
    with pytest.raises(ContainerReadError):
        read_container(tmp_path)


def test_not_a_plist():
    with pytest.raises(PlistFormatError):
        parse_container(b"\x00\x01garbage")


def test_container_not_a_dictionary():
    with pytest.raises(PlistFormatError, match="dictionary"):
        parse_container(plistlib.dumps(["a"]))


def test_items_key_missing():
    with pytest.raises(MissingFieldError) as excinfo:
        extract_items_blob({"otherKey": b""})
    assert excinfo.value.field == ITEMS_KEY


def test_items_key_not_data():
    with pytest.raises(FieldTypeError):
        extract_items_blob({ITEMS_KEY: "not bytes"})


def test_default_path_under_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    path = default_container_path()
    assert path.is_relative_to(tmp_path)
    assert path.name == "group.corybohon.Lockdown.plist"


def test_malformed_xml_container():
    with pytest.raises(PlistFormatError):
        parse_container(b'<?xml version="1.0"?><plist><dict><key>a</key></plist>')
