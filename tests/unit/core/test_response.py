"""
Tests for response results, conversion gating and body readers.
"""

import pytest
from requests.structures import CaseInsensitiveDict

from conftest import FakeResponse
from fetch_client.core.body import Blob, FormData
from fetch_client.core.config import ResponseType
from fetch_client.core.exceptions import BodyUsedError, FetchResponseError
from fetch_client.core.response import (
    ResponseKind,
    ResponseResult,
    convert_body,
    declares_body,
    resolve_response_type,
    should_convert,
)


class TestResponseResult:
    """Tests for ResponseResult."""

    @pytest.mark.parametrize("status, ok", [
        (199, False), (200, True), (204, True), (399, True), (400, False), (503, False),
    ])
    def test_ok_range(self, status, ok):
        result = ResponseResult(body=None, headers={}, status=status, status_text="")
        assert result.ok is ok

    def test_from_response(self):
        response = FakeResponse(201, headers={"Location": "/items/1"}, redirected=True)
        result = ResponseResult.from_response(response, {"id": 1})

        assert result.body == {"id": 1}
        assert result.headers == {"Location": "/items/1"}
        assert result.status == 201
        assert result.status_text == "Created"
        assert result.redirected is True
        assert result.type is ResponseKind.BASIC
        assert result.original is response

    def test_copies(self):
        result = ResponseResult(body=1, headers={"A": "1"}, status=200, status_text="OK")

        assert result.with_body(2).body == 2
        assert result.with_headers({"B": "2"}).headers == {"B": "2"}
        assert result.body == 1


class TestConversionGating:
    """Tests for declares_body and should_convert."""

    @pytest.mark.parametrize("headers, expected", [
        ({}, False),
        ({"Content-Type": "text/plain"}, True),
        ({"Content-Length": "0"}, False),
        ({"Content-Length": "12"}, True),
        ({"Content-Length": "abc"}, False),
        ({"Transfer-Encoding": "chunked"}, False),
    ])
    def test_declares_body(self, headers, expected):
        assert declares_body(CaseInsensitiveDict(headers)) is expected

    def test_should_convert(self):
        headers = CaseInsensitiveDict({"content-type": "application/json"})

        assert should_convert(ResponseType.JSON, "GET", headers) is True
        assert should_convert(ResponseType.NONE, "GET", headers) is False
        assert should_convert(None, "GET", headers) is False
        assert should_convert(ResponseType.JSON, "head", headers) is False
        assert should_convert(ResponseType.JSON, "OPTIONS", headers) is False


class TestResolveResponseType:
    """Tests for resolve_response_type."""

    def test_explicit_call_value_wins(self):
        assert resolve_response_type(None, "json", explicit=True) is ResponseType.NONE
        assert resolve_response_type("text", "json", explicit=True) is ResponseType.TEXT

    def test_default_used_when_not_explicit(self):
        assert resolve_response_type(None, "json", explicit=False) is ResponseType.JSON

    def test_invalid(self):
        assert resolve_response_type("yaml", "json", explicit=True) is None


class TestConvertBody:
    """Tests for convert_body and single-use body readers."""

    @pytest.mark.asyncio
    async def test_text_uses_charset(self):
        response = FakeResponse(200, body="привет".encode("cp1251"),
                                headers={"Content-Type": "text/plain; charset=cp1251"})
        assert await convert_body(response, ResponseType.TEXT) == "привет"

    @pytest.mark.asyncio
    async def test_json(self):
        response = FakeResponse(200, body=b'{"a": [1]}', headers={"Content-Type": "application/json"})
        assert await convert_body(response, ResponseType.JSON) == {"a": [1]}

    @pytest.mark.asyncio
    async def test_blob(self):
        response = FakeResponse(200, body=b"data", headers={"Content-Type": "image/gif"})
        blob = await convert_body(response, ResponseType.BLOB)
        assert blob == Blob(b"data", "image/gif")

    @pytest.mark.asyncio
    async def test_form_data(self):
        response = FakeResponse(200, body=b"x=1",
                                headers={"Content-Type": "application/x-www-form-urlencoded"})
        form = await convert_body(response, ResponseType.FORM_DATA)
        assert isinstance(form, FormData)
        assert form.get("x") == "1"

    @pytest.mark.asyncio
    async def test_unknown_reads_nothing(self):
        response = FakeResponse(200, body=b"data", headers={"Content-Type": "text/plain"})
        assert await convert_body(response, None) is None
        assert response.body_used is False

    @pytest.mark.asyncio
    async def test_body_read_once(self):
        """A second read raises BodyUsedError."""
        response = FakeResponse(200, body=b"data")
        await response.text()

        with pytest.raises(BodyUsedError):
            await response.array_buffer()
        with pytest.raises(BodyUsedError):
            response.stream()


class TestFetchResponseError:
    """Tests for FetchResponseError."""

    def test_attributes(self):
        result = ResponseResult(body={"error": "x"}, headers={}, status=404, status_text="Not Found")
        error = FetchResponseError("Not Found", result)

        assert str(error) == "Not Found"
        assert error.message == "Not Found"
        assert error.status == 404
        assert error.response is result
        assert repr(error) == "FetchResponseError('Not Found', status=404)"

    def test_without_response(self):
        assert FetchResponseError("boom").status is None
