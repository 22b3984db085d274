"""
Единый конверт ответа API.

Успех:  {"status": "Success", "payload": <T>}
Ошибка: {"status": "Error", "payload": {"underlying_error", "report", "trace_id", "span_id"}}
"""

from functools import lru_cache
from typing import Annotated, Any, Generic, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

T = TypeVar("T")


class ApiError(BaseModel):
    model_config = ConfigDict(frozen=True)

    underlying_error: str
    report: str
    trace_id: str
    span_id: str


class ApiCallFailed(Exception):
    """Вызов API завершился конвертом ошибки, а вызывающий код ждал данные."""

    def __init__(self, error: ApiError) -> None:
        super().__init__(f"{error.underlying_error}: {error.report} (trace_id={error.trace_id})")
        self.error = error


class Success(BaseModel, Generic[T]):
    status: Literal["Success"] = "Success"
    payload: T

    @property
    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.payload


class Failure(BaseModel):
    status: Literal["Error"] = "Error"
    payload: ApiError

    @property
    def is_success(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ApiCallFailed(self.payload)


# ApiResult[T] = Success[T] | Failure, различаются по полю status
ApiResult = Union[Success[T], Failure]


@lru_cache(maxsize=None)
def result_adapter(payload_type: Any) -> TypeAdapter:
    """TypeAdapter для разбора конверта с заданным типом payload."""
    return TypeAdapter(
        Annotated[Union[Success[payload_type], Failure], Field(discriminator="status")]
    )
