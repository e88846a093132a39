"""
Request/response body kinds.

Request bodies are classified into a closed set of kinds. Only the JSON
kind is serialized automatically, and only when no content-type is set.
"""

import io
import json
from collections.abc import AsyncIterable, Iterator
from email.parser import BytesParser
from email.policy import HTTP
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple, Union
from urllib.parse import parse_qsl

from requests.structures import CaseInsensitiveDict

from .config import UNSET, RequestOptions


class Blob:
    """
    Immutable binary payload with a content type.

    Example:
        >>> blob = Blob(b"secret", "application/octet-stream")
        >>> blob.size
        6
    """

    __slots__ = ('_content', 'content_type', 'name')

    def __init__(self, content: Union[bytes, bytearray, memoryview, str] = b"",
                 content_type: str = "", name: Optional[str] = None):
        if isinstance(content, str):
            content = content.encode('utf-8')
        self._content = bytes(content)
        self.content_type = content_type
        self.name = name

    @property
    def size(self) -> int:
        return len(self._content)

    @property
    def content(self) -> bytes:
        return self._content

    def text(self, encoding: str = 'utf-8') -> str:
        return self._content.decode(encoding)

    def __len__(self) -> int:
        return len(self._content)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Blob):
            return NotImplemented
        return self._content == other._content and self.content_type == other.content_type

    def __repr__(self) -> str:
        return f"Blob(size={self.size}, content_type={self.content_type!r})"


FormValue = Union[str, Blob]


class FormData:
    """
    Ordered, multi-valued form fields (text values or files as Blob).

    Example:
        >>> form = FormData({"name": "alice"})
        >>> form.append("file", Blob(b"...", "text/plain", name="a.txt"))
        >>> form.get("name")
        'alice'
    """

    def __init__(self, fields: Union[None, dict, Iterable[Tuple[str, FormValue]]] = None):
        self._items: List[Tuple[str, FormValue]] = []
        if fields:
            pairs = fields.items() if isinstance(fields, dict) else fields
            for name, value in pairs:
                self.append(name, value)

    def append(self, name: str, value: FormValue) -> None:
        self._items.append((name, value))

    def set(self, name: str, value: FormValue) -> None:
        self.delete(name)
        self.append(name, value)

    def delete(self, name: str) -> None:
        self._items = [(k, v) for k, v in self._items if k != name]

    def get(self, name: str, default: Any = None) -> Any:
        for key, value in self._items:
            if key == name:
                return value
        return default

    def get_all(self, name: str) -> List[FormValue]:
        return [value for key, value in self._items if key == name]

    def items(self) -> List[Tuple[str, FormValue]]:
        return list(self._items)

    def __contains__(self, name: str) -> bool:
        return any(key == name for key, _ in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"FormData({self._items!r})"

    def to_request(self) -> Tuple[dict, list]:
        """Split into (data, files) as accepted by httpx and requests."""
        data: dict = {}
        files: list = []
        for name, value in self._items:
            if isinstance(value, Blob):
                files.append((name, (value.name or name, value.content,
                                     value.content_type or 'application/octet-stream')))
            else:
                data.setdefault(name, []).append(value)
        return data, files

    @classmethod
    def parse(cls, content: bytes, content_type: str) -> 'FormData':
        """
        Parse an urlencoded or multipart/form-data payload.

        Raises:
            ValueError: Content type is neither of the two form encodings
        """
        mime = content_type.split(';', 1)[0].strip().lower()

        if mime == 'application/x-www-form-urlencoded':
            return cls(parse_qsl(content.decode('utf-8'), keep_blank_values=True))

        if mime == 'multipart/form-data':
            header = f"Content-Type: {content_type}\r\n\r\n".encode('latin-1')
            message = BytesParser(policy=HTTP).parsebytes(header + content)
            form = cls()
            for part in message.iter_parts():
                name = part.get_param('name', header='content-disposition')
                payload = part.get_payload(decode=True) or b""
                filename = part.get_filename()
                if filename is None:
                    form.append(name, payload.decode(part.get_content_charset() or 'utf-8'))
                else:
                    form.append(name, Blob(payload, part.get_content_type(), name=filename))
            return form

        raise ValueError(f"Could not parse content as FormData (content-type: {content_type!r})")


class BodyKind(str, Enum):
    """Closed set of request body kinds."""
    TEXT = "text"
    BINARY = "binary"
    BLOB = "blob"
    FORM = "form"
    STREAM = "stream"
    JSON = "json"


def classify_body(body: Any) -> BodyKind:
    """
    Determine the kind of a request body.

    JSON is the fallback arm: anything that is not a string, binary buffer,
    Blob, FormData or byte stream.

    Examples:
        >>> classify_body('{"a": 1}')
        <BodyKind.TEXT: 'text'>
        >>> classify_body({"a": 1})
        <BodyKind.JSON: 'json'>
    """
    if isinstance(body, str):
        return BodyKind.TEXT
    if isinstance(body, (bytes, bytearray, memoryview)):
        return BodyKind.BINARY
    if isinstance(body, Blob):
        return BodyKind.BLOB
    if isinstance(body, FormData):
        return BodyKind.FORM
    if isinstance(body, (io.IOBase, Iterator, AsyncIterable)):
        return BodyKind.STREAM
    return BodyKind.JSON


def normalize_body(options: RequestOptions) -> RequestOptions:
    """
    Serialize a JSON-kind body when no content-type is set.

    Expects ``options.headers`` to be a case-insensitive mapping. Strings
    and already-encoded kinds are passed through untouched.

    Returns:
        New RequestOptions (or the same instance when nothing changes)
    """
    body = options.body
    if body is UNSET or body is None:
        return options

    headers = options.headers
    if classify_body(body) is not BodyKind.JSON or 'content-type' in headers:
        return options

    headers = CaseInsensitiveDict(headers)
    headers['content-type'] = 'application/json'
    return options.replace(body=json.dumps(body), headers=headers)
