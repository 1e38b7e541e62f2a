"""
Integration tests: a live server on a loopback port, driven by raw sockets.
"""

import gzip
import socket
import threading
import types
from pathlib import Path

import pytest

from minihttp import server as server_module


class TestRoutes:
    """End-to-end behaviour of each built-in route."""

    def test_root(self, running_server):
        status, headers, body = running_server.request("GET", "/")

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Length"] == "0"
        assert body == b""

    def test_unknown_path(self, running_server):
        status, _, body = running_server.request("GET", "/nope")

        assert status == "HTTP/1.1 404 Not Found"
        assert body == b""

    def test_echo(self, running_server):
        status, headers, body = running_server.request("GET", "/echo/abc")

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/plain"
        assert headers["Content-Length"] == "3"
        assert "Content-Encoding" not in headers
        assert body == b"abc"

    def test_echo_exact_wire_format(self, running_server):
        raw = running_server.send_raw(b"GET /echo/abc HTTP/1.1\r\n\r\n")

        assert raw == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_echo_gzip(self, running_server):
        status, headers, body = running_server.request(
            "GET", "/echo/abc", headers={"Accept-Encoding": "gzip"}
        )

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Encoding"] == "gzip"
        assert headers["Content-Length"] == str(len(body))
        assert gzip.decompress(body) == b"abc"

    def test_echo_unrecognized_encoding(self, running_server):
        _, headers, body = running_server.request(
            "GET", "/echo/abc", headers={"Accept-Encoding": "invalid-encoding"}
        )

        assert "Content-Encoding" not in headers
        assert body == b"abc"

    def test_echo_encoding_list(self, running_server):
        _, headers, body = running_server.request(
            "GET", "/echo/hello", headers={"Accept-Encoding": "invalid, gzip, br"}
        )

        assert headers["Content-Encoding"] == "gzip, br"
        assert gzip.decompress(body) == b"hello"

    def test_user_agent(self, running_server):
        status, headers, body = running_server.request(
            "GET", "/user-agent", headers={"User-Agent": "foobar/1.2.3"}
        )

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/plain"
        assert body == b"foobar/1.2.3"

    def test_user_agent_not_compressed(self, running_server):
        _, headers, body = running_server.request(
            "GET", "/user-agent",
            headers={"User-Agent": "curl", "Accept-Encoding": "gzip"},
        )

        assert "Content-Encoding" not in headers
        assert body == b"curl"

    def test_missing_user_agent_drops_connection(self, running_server):
        raw = running_server.send_raw(b"GET /user-agent HTTP/1.1\r\nHost: x\r\n\r\n")

        assert raw == b""

    def test_version_echoed(self, running_server):
        raw = running_server.send_raw(b"GET / HTTP/1.0\r\n\r\n")

        assert raw.startswith(b"HTTP/1.0 200 OK\r\n")


class TestFiles:
    """The /files routes against the temporary serving directory."""

    def test_get_existing(self, running_server, tmp_path: Path):
        (tmp_path / "hello.txt").write_bytes(b"Hello, World!")

        status, headers, body = running_server.request("GET", "/files/hello.txt")

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "application/octet-stream"
        assert headers["Content-Length"] == "13"
        assert body == b"Hello, World!"

    def test_get_missing(self, running_server):
        status, _, body = running_server.request("GET", "/files/non_existent_file")

        assert status == "HTTP/1.1 404 Not Found"
        assert body == b""

    def test_post_then_get(self, running_server, tmp_path: Path):
        payload = bytes(range(256)) * 4

        status, _, body = running_server.request("POST", "/files/blob.bin", body=payload)
        assert status == "HTTP/1.1 201 Created"
        assert body == b""
        assert (tmp_path / "blob.bin").read_bytes() == payload

        status, _, body = running_server.request("GET", "/files/blob.bin")
        assert status == "HTTP/1.1 200 OK"
        assert body == payload

    def test_other_method_not_allowed(self, running_server):
        status, headers, _ = running_server.request("PUT", "/files/a.txt")

        assert status == "HTTP/1.1 405 Method Not Allowed"
        assert headers["Allow"] == "GET, POST"

    def test_concurrent_posts(self, running_server, tmp_path: Path):
        names = [f"file{i}.txt" for i in range(20)]
        results = {}

        def upload(name: str):
            results[name] = running_server.request(
                "POST", f"/files/{name}", body=name.encode()
            )[0]

        threads = [threading.Thread(target=upload, args=(name,)) for name in names]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert all(status == "HTTP/1.1 201 Created" for status in results.values())
        assert len(results) == len(names)
        for name in names:
            assert (tmp_path / name).read_bytes() == name.encode()

            status, _, body = running_server.request("GET", f"/files/{name}")
            assert status == "HTTP/1.1 200 OK"
            assert body == name.encode()


class TestConnectionHandling:
    """Malformed input, slow clients and the accept loop."""

    @pytest.mark.parametrize("raw", [
        b"NONSENSE\r\n\r\n",
        b"BREW /pot HTTP/1.1\r\n\r\n",
        b"POST /files/x HTTP/1.1\r\nContent-Length: abc\r\n\r\n",
        b"POST /files/x HTTP/1.1\r\nContent-Length: 10\r\n\r\nshort",
        b"GET / HTTP/1.1\r\nHost: x\r\n",
        b"",
    ])
    def test_bad_request_closes_without_response(self, running_server, raw: bytes):
        assert running_server.send_raw(raw) == b""

    def test_server_survives_bad_clients(self, running_server):
        running_server.send_raw(b"garbage")
        running_server.send_raw(b"")

        status, _, _ = running_server.request("GET", "/")
        assert status == "HTTP/1.1 200 OK"

    def test_request_split_across_writes(self, running_server):
        with socket.create_connection(("127.0.0.1", running_server.port), timeout=5.0) as s:
            for piece in (b"GET /ec", b"ho/split HTTP/1.1\r\nUser-", b"Agent: x\r\n", b"\r\n"):
                s.sendall(piece)

            received = b""
            while True:
                chunk = s.recv(1024)
                if not chunk:
                    break
                received += chunk

        assert received.endswith(b"\r\n\r\nsplit")

    def test_slow_client_does_not_block_others(self, running_server):
        with socket.create_connection(("127.0.0.1", running_server.port), timeout=5.0) as idle:
            idle.sendall(b"GET / HTTP/1.1\r\n")  # Never finishes its headers

            status, _, body = running_server.request("GET", "/echo/still-serving")

        assert status == "HTTP/1.1 200 OK"
        assert body == b"still-serving"

    def test_shutdown_stops_listening(self, running_server):
        port = running_server.port
        running_server.stop()

        with pytest.raises(OSError):
            socket.create_connection(("127.0.0.1", port), timeout=1.0)

    def test_failed_handoff_keeps_accepting(self, running_server, monkeypatch):
        failures = []

        class FlakyThread(threading.Thread):
            def start(self):
                if not failures:
                    failures.append(self.name)
                    raise RuntimeError("can't start new thread")
                super().start()

        monkeypatch.setattr(server_module, "threading", types.SimpleNamespace(Thread=FlakyThread))

        assert running_server.send_raw(b"GET / HTTP/1.1\r\n\r\n") == b""
        assert len(failures) == 1

        status, _, _ = running_server.request("GET", "/")
        assert status == "HTTP/1.1 200 OK"
