"""Исключения для работы с Dotypos API.

Истечение access-токена исключением не является: это внутренний исход
запроса, который обрабатывается повтором внутри клиента.
Ошибки транспорта (httpx) пробрасываются как есть.
"""


class DotyposException(Exception):
    """Базовое исключение для ошибок Dotypos API."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class DotyposAuthException(DotyposException):
    """Базовое исключение для ошибок аутентификации."""


class RefreshTokenExpired(DotyposAuthException):
    """Refresh-токен больше недействителен (401 на запрос signin).

    Автоматического восстановления нет: приложение должно получить
    новые учетные данные самостоятельно.
    """


class AccessTokenRejected(DotyposAuthException):
    """Сервер отклонил access-токен и после его обновления."""


class UnknownError(DotyposException):
    """Неожиданный ответ сервера на запрос signin."""

    def __init__(
        self,
        status_code: int,
        body: str,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(f"{status_code}: {body}", original_error=original_error)
        self.status_code = status_code
        self.body = body
