"""Общие фикстуры для тестов dotypos.

Unit-тесты работают через httpx.MockTransport и не ходят в сеть.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import httpx
import pytest

from dotypos import ApiCredentials, DotyposApiClientManager

BASE_URL = "https://api.test"
CLOUD_ID = "cloud-1"


def page_body(
    records: list[dict[str, Any]],
    total_items: int,
    last_page: Any,
    data_key: str = "data",
) -> dict[str, Any]:
    """Собрать тело ответа одной страницы списка."""
    return {
        data_key: records,
        "totalItemsCount": total_items,
        "lastPage": last_page,
    }


class FakeDotyposApi:
    """Поддельный Dotypos API для httpx.MockTransport.

    Ответы ставятся в очередь по ключу «путь» или «путь?page=N».
    Последний ответ в очереди повторяется для всех следующих запросов.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[str, list[httpx.Response | Exception]] = {}

    @staticmethod
    def key(path: str, page: int | None = None) -> str:
        return path if page is None else f"{path}?page={page}"

    def add(
        self, path: str, *responses: httpx.Response | Exception, page: int | None = None
    ) -> None:
        self._routes.setdefault(self.key(path, page), []).extend(responses)

    def add_list(self, resource: str, *responses: httpx.Response, page: int | None = None) -> None:
        self.add(f"/v2/clouds/{CLOUD_ID}/{resource}", *responses, page=page)

    def add_signin(self, *responses: httpx.Response) -> None:
        self.add("/v2/signin/token", *responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        page = request.url.params.get("page")
        queue = self._routes.get(
            self.key(request.url.path, int(page) if page is not None else None)
        )
        if not queue:
            return httpx.Response(500, json={"error": "unexpected request"})
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def list_requests(self) -> list[httpx.Request]:
        """Запросы к спискам (без signin)."""
        return [r for r in self.requests if r.url.path.startswith("/v2/clouds/")]

    def signin_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/v2/signin/token"]


@pytest.fixture
def fake_api() -> FakeDotyposApi:
    return FakeDotyposApi()


@pytest.fixture
def http_client(fake_api: FakeDotyposApi) -> Generator[httpx.Client, None, None]:
    client = httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(fake_api))
    yield client
    client.close()


@pytest.fixture
def credentials() -> ApiCredentials:
    return ApiCredentials(
        cloud_id=CLOUD_ID,
        refresh_token="refresh-token",
        access_token="old-access-token",
    )


@pytest.fixture
def manager(
    credentials: ApiCredentials, http_client: httpx.Client
) -> DotyposApiClientManager:
    """Менеджер поверх поддельного API с обработчиком по умолчанию."""
    return DotyposApiClientManager(credentials, http_client=http_client)
