"""Фасад Dotypos API с повтором запроса при истёкшем access-токене.

Один экземпляр на одни учетные данные; экземпляры ничего не разделяют.
Клиент рассчитан на использование из одного потока.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx

from dotypos.config_reader import DEFAULT_BASE_URL, DotyposConfig
from dotypos.exceptions import AccessTokenRejected
from dotypos.pagination import ApiEnumerator
from dotypos.token_manager import TokenManager

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

# Повторов на один логический вызов после обновления токена
MAX_TOKEN_RETRIES = 1

DATA_KEY = "data"


@dataclass
class ApiCredentials:
    """Учетные данные для Dotypos.

    Attributes:
        cloud_id: Идентификатор облака
        refresh_token: Refresh-токен, неизменен на всё время жизни клиента
        access_token: Текущий access-токен, заменяется при обновлении
    """

    cloud_id: str
    refresh_token: str
    access_token: str = ""


class OutcomeKind(enum.Enum):
    OK = "ok"
    AUTH_EXPIRED = "auth_expired"
    TRANSPORT_ERROR = "transport_error"


@dataclass
class RequestOutcome:
    """Результат одной попытки запроса."""

    kind: OutcomeKind
    response: dict[str, Any] | None = None
    error: httpx.TransportError | None = None

    @classmethod
    def ok(cls, response: dict[str, Any]) -> RequestOutcome:
        return cls(OutcomeKind.OK, response=response)

    @classmethod
    def auth_expired(cls) -> RequestOutcome:
        return cls(OutcomeKind.AUTH_EXPIRED)

    @classmethod
    def transport_error(cls, error: httpx.TransportError) -> RequestOutcome:
        return cls(OutcomeKind.TRANSPORT_ERROR, error=error)


def empty_page() -> dict[str, Any]:
    """Нормализованный ответ для фильтра без результатов."""
    return {"code": 404, DATA_KEY: [], "totalItemsCount": 0, "lastPage": 1}


def normalize_response(response: httpx.Response) -> RequestOutcome:
    """Классифицировать HTTP-ответ API.

    Args:
        response: Ответ сервера

    Returns:
        AUTH_EXPIRED для 403, пустую страницу для 404,
        иначе разобранный JSON с полем code
    """
    if response.status_code == 403:
        return RequestOutcome.auth_expired()

    # API отвечает 404, когда фильтру не соответствует ни одна запись
    if response.status_code == 404:
        return RequestOutcome.ok(empty_page())

    parsed: Any = response.json() if response.content else {}
    if not isinstance(parsed, dict):
        parsed = {DATA_KEY: parsed}
    return RequestOutcome.ok({**parsed, "code": response.status_code})


def refresh_access_token(client: DotyposApiClientManager) -> None:
    """Обработчик ошибки токена по умолчанию.

    Получает новый access-токен и записывает его в клиента.
    Приложению, которое хранит токены, стоит передать свой обработчик.
    """
    client.renew_access_token()


TokenErrorHandler = Callable[["DotyposApiClientManager"], None]


class DotyposApiClientManager:
    """Фасад для работы с Dotypos API.

    Содержит: httpx.Client, TokenManager.
    Списочные методы возвращают ленивый ApiEnumerator.

    Использование:
        manager = DotyposApiClientManager(credentials, on_token_error=save_token)
        for product in manager.products():
            ...
    """

    def __init__(
        self,
        credentials: ApiCredentials,
        on_token_error: TokenErrorHandler | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Инициализация менеджера.

        Args:
            credentials: Учетные данные API
            on_token_error: Вызывается с клиентом после 403; должен обновить
                client.access_token (обычно через new_access_token)
            base_url: Адрес API
            timeout: Таймаут запросов в секундах
            http_client: Готовый httpx.Client; закрывать его должен владелец
        """
        self._credentials = credentials
        self._on_token_error = on_token_error or refresh_access_token
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(base_url=base_url, timeout=timeout)
        self._http_client = http_client
        self._token_manager = TokenManager(self._http_client, self._credentials)
        logger.debug(
            "Создан экземпляр DotyposApiClientManager для cloud_id=%s",
            credentials.cloud_id,
        )

    @classmethod
    def from_config(
        cls,
        config: DotyposConfig,
        on_token_error: TokenErrorHandler | None = None,
    ) -> DotyposApiClientManager:
        """Создать экземпляр из конфигурации Dotypos.

        Args:
            config: Конфигурация Dotypos из YAML-файла
            on_token_error: Обработчик ошибки токена

        Returns:
            Экземпляр DotyposApiClientManager
        """
        access_token = config.access_token
        credentials = ApiCredentials(
            cloud_id=config.cloud_id,
            refresh_token=config.refresh_token.get_secret_value(),
            access_token=access_token.get_secret_value() if access_token else "",
        )
        return cls(
            credentials,
            on_token_error,
            base_url=config.base_url,
            timeout=config.timeout,
        )

    @property
    def cloud_id(self) -> str:
        return self._credentials.cloud_id

    @property
    def access_token(self) -> str:
        return self._credentials.access_token

    @access_token.setter
    def access_token(self, value: str) -> None:
        self._credentials.access_token = value

    def close(self) -> None:
        """Закрыть HTTP-соединения, если клиент создан менеджером."""
        if self._owns_http_client:
            self._http_client.close()

    def __enter__(self) -> DotyposApiClientManager:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ========== Запросы ==========

    def _send(self, path: str, params: dict[str, Any]) -> RequestOutcome:
        """Выполнить одну попытку GET-запроса с текущим токеном."""
        try:
            response = self._http_client.get(
                f"/v2/clouds/{self.cloud_id}/{path}",
                params=params or None,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "Authorization": f"Bearer {self.access_token}",
                },
            )
        except httpx.TransportError as exc:
            return RequestOutcome.transport_error(exc)
        return normalize_response(response)

    def get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Выполнить GET-запрос с обновлением токена при 403.

        Токен обновляется не более одного раза на вызов.

        Args:
            path: Путь ресурса относительно облака (например, "products")
            params: Параметры запроса

        Returns:
            Нормализованный ответ с полем code

        Raises:
            AccessTokenRejected: Если и после обновления токена получен 403
            RefreshTokenExpired: Если обработчик не смог обновить токен
            httpx.TransportError: При сетевых ошибках
        """
        params = dict(params or {})
        retries = 0
        while True:
            outcome = self._send(path, params)

            if outcome.kind is OutcomeKind.TRANSPORT_ERROR and outcome.error is not None:
                raise outcome.error

            if outcome.kind is OutcomeKind.OK and outcome.response is not None:
                return outcome.response

            if retries >= MAX_TOKEN_RETRIES:
                logger.warning(
                    "Токен отклонён после обновления: cloud_id=%s, path=%s",
                    self.cloud_id,
                    path,
                )
                raise AccessTokenRejected(
                    f"Access-токен отклонён после обновления ({path})"
                )

            logger.debug("Токен истёк, обновляем")
            retries += 1
            self._on_token_error(self)

    def new_access_token(self) -> str:
        """Получить новый access-токен по refresh-токену.

        Вызывается обработчиком ошибки токена, а не самим клиентом.

        Raises:
            RefreshTokenExpired: Если refresh-токен недействителен
            UnknownError: При другом неуспешном ответе
        """
        return self._token_manager.fetch_token()

    def renew_access_token(self) -> str:
        """Получить новый access-токен и сохранить его в клиенте."""
        return self._token_manager.refresh()

    def valid_credentials(self) -> bool:
        """Проверить учетные данные лёгким запросом списка филиалов."""
        try:
            return self.get("branches").get("code") == 200
        except AccessTokenRejected:
            return False

    # ========== Списки ==========

    def enumerize(
        self,
        path: str,
        data_key: str = DATA_KEY,
        params: dict[str, Any] | None = None,
    ) -> ApiEnumerator:
        """Получить ленивую последовательность записей ресурса.

        Args:
            path: Путь ресурса
            data_key: Ключ списка записей в ответе
            params: Параметры фильтрации

        Returns:
            ApiEnumerator по всем страницам
        """
        return ApiEnumerator(path, data_key, params, self)

    def branches(self, params: dict[str, Any] | None = None) -> ApiEnumerator:
        """Филиалы облака."""
        return self.enumerize("branches", DATA_KEY, params)

    def products(self, params: dict[str, Any] | None = None) -> ApiEnumerator:
        """Товары облака."""
        return self.enumerize("products", DATA_KEY, params)

    def categories(self, params: dict[str, Any] | None = None) -> ApiEnumerator:
        """Категории товаров."""
        return self.enumerize("categories", DATA_KEY, params)
