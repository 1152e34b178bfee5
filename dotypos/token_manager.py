"""Менеджер токенов для Dotypos API.

Получает новый access-токен по refresh-токену через signin-эндпоинт.
Сам менеджер ничего не сохраняет вне клиента: хранение токенов
остаётся задачей вызывающего приложения.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from dotypos.exceptions import RefreshTokenExpired, UnknownError

if TYPE_CHECKING:
    from dotypos.api_client_manager import ApiCredentials

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

SIGNIN_PATH = "/v2/signin/token"


class TokenManager:
    """Менеджер токенов для конкретного клиента.

    Токен обновляется только по запросу обработчика ошибки токена,
    то есть после ответа 403 на обычный запрос.
    """

    def __init__(self, http_client: httpx.Client, credentials: ApiCredentials) -> None:
        """Инициализация менеджера токенов.

        Args:
            http_client: HTTP-клиент с настроенным base_url
            credentials: Учетные данные клиента (access_token меняется на месте)
        """
        self._http_client = http_client
        self._credentials = credentials
        self._token_version: int = 0

    @property
    def token_version(self) -> int:
        """Сколько раз токен был обновлён этим менеджером."""
        return self._token_version

    def fetch_token(self) -> str:
        """Получить новый access-токен от API.

        Returns:
            Новый access-токен

        Raises:
            RefreshTokenExpired: Если refresh-токен недействителен (401)
            UnknownError: При любом другом неуспешном статусе
        """
        cloud_id = self._credentials.cloud_id
        logger.debug("Запрос токена для cloud_id=%s", cloud_id)

        response = self._http_client.post(
            SIGNIN_PATH,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"User {self._credentials.refresh_token}",
            },
            json={"_cloudId": cloud_id},
        )

        if response.status_code in (200, 201):
            return str(response.json()["accessToken"])

        if response.status_code == 401:
            logger.error(
                "Refresh-токен недействителен для cloud_id=%s: получен 401",
                cloud_id,
            )
            raise RefreshTokenExpired(
                "Refresh-токен недействителен: получен 401 на запрос signin"
            )

        logger.error(
            "Ошибка при получении токена для cloud_id=%s: статус %d",
            cloud_id,
            response.status_code,
        )
        raise UnknownError(response.status_code, response.text)

    def refresh(self) -> str:
        """Получить новый токен и записать его в учетные данные.

        Returns:
            Новый access-токен
        """
        token = self.fetch_token()
        self._credentials.access_token = token
        self._token_version += 1
        logger.info(
            "Токен обновлён для cloud_id=%s (версия: %d)",
            self._credentials.cloud_id,
            self._token_version,
        )
        return token
