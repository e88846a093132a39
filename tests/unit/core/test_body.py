"""
Tests for request/response body kinds.
"""

import io
import json

import pytest
from requests.structures import CaseInsensitiveDict

from fetch_client.core.body import Blob, BodyKind, FormData, classify_body, normalize_body
from fetch_client.core.config import RequestOptions


class TestBlob:
    """Tests for Blob."""

    def test_basic(self):
        blob = Blob(b"secret", "application/octet-stream", name="key.bin")
        assert blob.size == 6
        assert len(blob) == 6
        assert blob.content == b"secret"
        assert blob.name == "key.bin"

    def test_from_str(self):
        """Text content is stored as UTF-8."""
        blob = Blob("привет", "text/plain")
        assert blob.content == "привет".encode("utf-8")
        assert blob.text() == "привет"

    def test_equality(self):
        assert Blob(b"a", "text/plain") == Blob(bytearray(b"a"), "text/plain")
        assert Blob(b"a", "text/plain") != Blob(b"a", "text/html")


class TestFormData:
    """Tests for FormData."""

    def test_multi_valued(self):
        form = FormData([("tag", "a"), ("tag", "b")])
        form.append("name", "alice")

        assert form.get("tag") == "a"
        assert form.get_all("tag") == ["a", "b"]
        assert "name" in form
        assert len(form) == 3

    def test_set_and_delete(self):
        form = FormData({"a": "1"})
        form.append("a", "2")
        form.set("a", "3")
        assert form.get_all("a") == ["3"]

        form.delete("a")
        assert "a" not in form
        assert form.get("a", "missing") == "missing"

    def test_to_request_splits_files(self):
        """Text fields go to data, Blob fields to files."""
        form = FormData({"name": "alice"})
        form.append("avatar", Blob(b"PNG", "image/png", name="a.png"))
        form.append("doc", Blob(b"x"))

        data, files = form.to_request()

        assert data == {"name": ["alice"]}
        assert files == [
            ("avatar", ("a.png", b"PNG", "image/png")),
            ("doc", ("doc", b"x", "application/octet-stream")),
        ]

    def test_parse_urlencoded(self):
        form = FormData.parse(b"a=1&b=hello+world&empty=",
                              "application/x-www-form-urlencoded; charset=utf-8")
        assert form.items() == [("a", "1"), ("b", "hello world"), ("empty", "")]

    def test_parse_multipart(self):
        """Multipart parts become text values or Blobs."""
        content = (
            b"--BOUNDARY\r\n"
            b'Content-Disposition: form-data; name="name"\r\n'
            b"\r\n"
            b"alice\r\n"
            b"--BOUNDARY\r\n"
            b'Content-Disposition: form-data; name="file"; filename="a.txt"\r\n'
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"hello\r\n"
            b"--BOUNDARY--\r\n"
        )

        form = FormData.parse(content, "multipart/form-data; boundary=BOUNDARY")

        assert form.get("name") == "alice"
        blob = form.get("file")
        assert isinstance(blob, Blob)
        assert blob.name == "a.txt"
        assert blob.content_type == "text/plain"
        assert blob.content == b"hello"

    def test_parse_unsupported(self):
        with pytest.raises(ValueError):
            FormData.parse(b"{}", "application/json")


class TestClassifyBody:
    """Tests for classify_body."""

    async def _agen(self):
        yield b"x"

    @pytest.mark.parametrize("body, kind", [
        ('{"a": 1}', BodyKind.TEXT),
        (b"bytes", BodyKind.BINARY),
        (bytearray(b"x"), BodyKind.BINARY),
        (memoryview(b"x"), BodyKind.BINARY),
        (Blob(b"x"), BodyKind.BLOB),
        (FormData(), BodyKind.FORM),
        (io.BytesIO(b"x"), BodyKind.STREAM),
        (iter([b"x"]), BodyKind.STREAM),
        ({"a": 1}, BodyKind.JSON),
        ([1, 2], BodyKind.JSON),
        (42, BodyKind.JSON),
        (True, BodyKind.JSON),
    ])
    def test_kinds(self, body, kind):
        assert classify_body(body) is kind

    def test_async_iterable_is_stream(self):
        agen = self._agen()
        assert classify_body(agen) is BodyKind.STREAM


class TestNormalizeBody:
    """Tests for normalize_body."""

    def _options(self, body, headers=None):
        return RequestOptions(body=body, headers=CaseInsensitiveDict(headers or {}))

    def test_json_serialized(self):
        options = normalize_body(self._options({"a": [1, 2]}))

        assert json.loads(options.body) == {"a": [1, 2]}
        assert options.headers["Content-Type"] == "application/json"

    def test_input_not_mutated(self):
        """The original options keep their headers."""
        original = self._options({"a": 1})
        normalize_body(original)
        assert "content-type" not in original.headers

    def test_scalar_json(self):
        """Numbers and lists fall into the JSON arm too."""
        assert normalize_body(self._options(0)).body == "0"
        assert normalize_body(self._options([1])).body == "[1]"

    def test_string_passthrough(self):
        options = self._options('{"a": 1}')
        assert normalize_body(options) is options

    @pytest.mark.parametrize("body", [b"x", Blob(b"x"), FormData({"a": "1"}), io.BytesIO(b"x")])
    def test_encoded_kinds_passthrough(self, body):
        options = self._options(body)
        result = normalize_body(options)
        assert result.body is body
        assert "content-type" not in result.headers

    def test_existing_content_type(self):
        """Case-insensitive content-type check."""
        options = self._options({"a": 1}, {"CONTENT-TYPE": "text/plain"})
        assert normalize_body(options) is options

    def test_no_body(self):
        options = RequestOptions(headers=CaseInsensitiveDict())
        assert normalize_body(options) is options
        none_body = self._options(None)
        assert normalize_body(none_body) is none_body
