# header_scanner/scan_log.py
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Protocol, Tuple

from .analyzers import split_set_cookie
from .models import LogEntry, LogType

logger = logging.getLogger(__name__)


class LogSink(Protocol):
    def append(self, entry: LogEntry) -> None: ...


class ScanLog:
    """Append-only log of one scan. Probes share it; entry order across probes is not meaningful."""

    def __init__(self):
        self._entries: List[LogEntry] = []

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)
        logger.debug("[%s] %s", entry.type.value, entry.message)

    def add(self, type_: LogType, message: str) -> LogEntry:
        entry = LogEntry(timestamp=_timestamp(), type=LogType(type_), message=message)
        self.append(entry)
        return entry

    def error(self, message: str) -> LogEntry:
        return self.add(LogType.ERROR, message)

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%H:%M:%S")


def emit(sink: LogSink, type_: LogType, message: str) -> None:
    sink.append(LogEntry(timestamp=_timestamp(), type=type_, message=message))


def log_headers(sink: LogSink, headers: Iterable[Tuple[str, str]], prefix: str = "") -> None:
    """One entry per header; multi-cookie Set-Cookie values also get one entry per cookie."""
    for key, value in headers:
        emit(sink, LogType.RESPONSE, f"{prefix}{key}: {value}")
        if key.lower() != "set-cookie" or not value:
            continue
        cookies = split_set_cookie(value)
        if len(cookies) > 1:
            emit(sink, LogType.RESPONSE, f"{prefix}Found {len(cookies)} cookies:")
            for i, cookie in enumerate(cookies, start=1):
                name = cookie.split("=", 1)[0].strip()
                emit(sink, LogType.RESPONSE, f"{prefix}  Cookie {i} ({name}): {cookie}")
