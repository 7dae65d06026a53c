import json
from unittest.mock import patch
from promptfeeder.utils.file_io import read_lines, safe_read_json, safe_write_json, write_new_text


def test_safe_read_json_success(tmp_path):
    f = tmp_path / "test.json"
    data = {"chat_url": "https://example.com"}
    f.write_text(json.dumps(data))
    assert safe_read_json(f) == data


def test_safe_read_json_missing(tmp_path):
    f = tmp_path / "missing.json"
    assert safe_read_json(f, default={"def": 1}) == {"def": 1}


def test_safe_read_json_corrupt(tmp_path):
    f = tmp_path / "corrupt.json"
    f.write_text("{invalid")
    assert safe_read_json(f, default={}) == {}


def test_safe_write_json_creates_parents(tmp_path):
    f = tmp_path / "logs" / "run.json"
    assert safe_write_json(f, {"key": "val"}) is True
    assert json.loads(f.read_text()) == {"key": "val"}


@patch("pathlib.Path.write_text")
def test_safe_write_json_permission_error(mock_write, tmp_path):
    mock_write.side_effect = PermissionError("Denied")
    assert safe_write_json(tmp_path / "locked.json", {"test": 1}) is False


def test_read_lines_handles_crlf_and_bad_bytes(tmp_path):
    f = tmp_path / "p.txt"
    f.write_bytes(b"one\r\ntwo\xff\n")
    assert read_lines(f) == ["one", "two�"]


def test_write_new_text_appends_counter(tmp_path):
    target = tmp_path / "out" / "output-a.txt"
    assert write_new_text(target, "1") == target
    assert write_new_text(target, "2") == tmp_path / "out" / "output-a-1.txt"
    assert write_new_text(target, "3") == tmp_path / "out" / "output-a-2.txt"
    assert target.read_text(encoding="utf-8") == "1"
