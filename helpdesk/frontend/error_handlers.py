"""
Человекочитаемые сообщения об ошибках API для страниц клиента.

В сообщение всегда попадают trace_id / span_id, чтобы пользователь мог
передать их в поддержку, а мы найти запрос в логах backend.
"""

from helpdesk.shared.schemas import ApiError

# underlying_error -> что показать пользователю
_USER_MESSAGES = {
    "NotFound": "Объект не найден",
    "RouteNotFound": "Страница не найдена",
    "Forbidden": "Недостаточно прав",
    "NoCookie": "Нужно войти в систему",
    "InvalidToken": "Сессия истекла, войдите снова",
    "AuthenticatedUserNotFound": "Пользователь сессии не найден, войдите снова",
    "InvalidAuthData": "Данные входа неверны или устарели",
    "AlreadyExists": "Такой объект уже существует",
}


def describe_error(error: ApiError) -> str:
    title = _USER_MESSAGES.get(error.underlying_error, "Ошибка сервера")
    return f"{title}: {error.report} (trace_id={error.trace_id}, span_id={error.span_id})"


def describe_transport_error(exc: Exception) -> str:
    return f"Сервер недоступен, попробуйте позже ({exc})"
