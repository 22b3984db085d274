"""
Контекст трассировки запроса (trace_id / span_id в формате W3C traceparent).

Идентификаторы попадают в конверт ошибки, чтобы по отчёту пользователя
можно было найти запрос в логах.
"""

import re
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

TRACEPARENT_HEADER = "traceparent"
_TRACEPARENT_RE = re.compile(r"^[0-9a-f]{2}-([0-9a-f]{32})-([0-9a-f]{16})-[0-9a-f]{2}$")


@dataclass(frozen=True)
class TraceContext:
    trace_id: str
    span_id: str

    def traceparent(self) -> str:
        return f"00-{self.trace_id}-{self.span_id}-01"


def new_trace_id() -> str:
    return uuid.uuid4().hex


def new_span_id() -> str:
    return uuid.uuid4().hex[:16]


def from_traceparent(header: Optional[str]) -> TraceContext:
    """Продолжить входящую трассу (новый span) или начать новую."""
    match = _TRACEPARENT_RE.match(header.strip().lower()) if header else None
    trace_id = match.group(1) if match else new_trace_id()
    return TraceContext(trace_id=trace_id, span_id=new_span_id())


def get_trace(request: Request) -> TraceContext:
    trace = getattr(request.state, "trace", None)
    if trace is None:
        trace = from_traceparent(request.headers.get(TRACEPARENT_HEADER))
        request.state.trace = trace
    return trace
