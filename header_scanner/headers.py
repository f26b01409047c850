from typing import Iterable, Mapping, Optional, Tuple, Union

import httpx

# case-insensitive, ordered multi-mapping; get() joins repeated values with ", "
HeaderSet = httpx.Headers

RawHeaders = Union[httpx.Headers, Mapping[str, str], Iterable[Tuple[str, str]], None]


def _encode(text) -> bytes:
    # httpx encodes str header values as ascii; utf-8 bytes keep any decoded value intact
    if isinstance(text, bytes):
        return text
    return str(text).encode("utf-8")


def build_header_set(headers: RawHeaders = None) -> HeaderSet:
    if headers is None:
        return httpx.Headers()
    if isinstance(headers, httpx.Headers):
        return httpx.Headers(headers.raw)
    if isinstance(headers, Mapping):
        headers = headers.items()
    return httpx.Headers([(_encode(k), _encode(v)) for k, v in headers])


def occurrences(headers: Optional[HeaderSet], name: str) -> int:
    if headers is None:
        return 0
    return len(headers.get_list(name))
