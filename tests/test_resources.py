import io
import socket
import sqlite3
import tempfile

from lognormalizer.kinds import ValueKind, classify, is_handle
from lognormalizer.normalizer import Normalizer
from lognormalizer.utils import handle_identifier


def test_open_file_renders_truncated_resource_marker(tmp_path) -> None:
    target = tmp_path / "a-rather-long-file-name-for-the-handle-test.log"
    target.write_text("line one\nline two\n", encoding="utf-8")

    with target.open("r", encoding="utf-8") as handle:
        normalized = Normalizer().normalize(handle)
        assert classify(handle) is ValueKind.HANDLE
        # The handle must not be consumed by iteration.
        assert handle.read() == "line one\nline two\n"
        identifier = repr(handle)[:40]

    assert normalized.startswith("[resource] ")
    suffix = normalized[len("[resource] "):]
    assert 0 < len(suffix) <= 40
    assert suffix == identifier


def test_socket_renders_as_resource() -> None:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        normalized = Normalizer().normalize({"conn": sock})
    finally:
        sock.close()
    assert normalized["conn"].startswith("[resource] <socket.socket")
    assert len(normalized["conn"]) <= len("[resource] ") + 40


def test_in_memory_streams_are_handles() -> None:
    assert classify(io.BytesIO(b"data")) is ValueKind.HANDLE
    assert Normalizer().normalize(io.StringIO("x")).startswith("[resource] <_io.StringIO")


def test_handle_identifier_survives_broken_repr() -> None:
    class Weird:
        def __repr__(self) -> str:
            raise RuntimeError("no repr")

    assert handle_identifier(Weird()) == "<Weird>"
    assert handle_identifier("x" * 100) == "'" + "x" * 39


def test_named_temporary_file_is_a_handle_and_is_not_consumed() -> None:
    with tempfile.NamedTemporaryFile("w+", encoding="utf-8") as handle:
        handle.write("one\ntwo\n")
        handle.flush()
        handle.seek(0)

        normalized = Normalizer().normalize({"upload": handle})

        assert classify(handle) is ValueKind.HANDLE
        assert normalized["upload"].startswith("[resource] ")
        assert handle.read() == "one\ntwo\n"


def test_sqlite_cursor_is_a_handle() -> None:
    conn = sqlite3.connect(":memory:")
    try:
        cursor = conn.execute("SELECT 1 UNION ALL SELECT 2")
        assert classify(cursor) is ValueKind.HANDLE
        assert Normalizer().normalize(cursor).startswith("[resource] <sqlite3.Cursor")
        assert cursor.fetchall() == [(1,), (2,)]
    finally:
        conn.close()


def test_classes_of_file_types_are_not_handles() -> None:
    assert not is_handle(io.StringIO)
