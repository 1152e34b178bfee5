"""Ленивый постраничный обход списков Dotypos API.

Страницы запрашиваются строго по порядку и только тогда, когда
потребитель дочитал записи предыдущей страницы.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from dotypos.api_client_manager import DotyposApiClientManager

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

Record = dict[str, Any]


def coerce_int(value: Any) -> int:
    """Привести значение к int, вернув 0 для отсутствующих и битых значений."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class ApiEnumerator(Iterator[Record]):
    """Последовательность записей, охватывающая все страницы ресурса.

    Первая и последняя страницы кэшируются в экземпляре, поэтому
    size и total_pages можно запрашивать сколько угодно раз.
    После исчерпания экземпляр не перезапускается: для нового обхода
    нужно создать новый энумератор.

    Использование:
        products = manager.products({"filter": "deleted|eq|false"})
        print(len(products))
        for product in products:
            ...
    """

    def __init__(
        self,
        path: str,
        data_key: str,
        params: dict[str, Any] | None,
        api: DotyposApiClientManager,
    ) -> None:
        self._path = path
        self._data_key = data_key
        self._params = dict(params or {})
        self._api = api

        self._first_page: dict[str, Any] | None = None
        self._last_page: dict[str, Any] | None = None

        # Курсор по записям текущей страницы
        self._records: Iterator[Record] | None = None
        # Номер следующей страницы; None — страниц больше нет
        self._next_page: int | None = 2

    def _fetch(self, page: int | None = None) -> dict[str, Any]:
        params = dict(self._params)
        if page is not None:
            params["page"] = page
        logger.debug("Запрос страницы %s ресурса %s", page or 1, self._path)
        return self._api.get(self._path, params)

    @property
    def first_page(self) -> dict[str, Any]:
        """Первая страница (запрашивается без параметра page)."""
        if self._first_page is None:
            self._first_page = self._fetch()
        return self._first_page

    @property
    def last_page(self) -> dict[str, Any]:
        """Последняя страница; при одной странице совпадает с первой."""
        if self.total_pages < 2:
            return self.first_page
        if self._last_page is None:
            self._last_page = self._fetch(self.total_pages)
        return self._last_page

    @property
    def total_pages(self) -> int:
        return coerce_int(self.first_page.get("lastPage"))

    @property
    def size(self) -> int:
        """Общее число записей по данным первой страницы."""
        return coerce_int(self.first_page.get("totalItemsCount"))

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> ApiEnumerator:
        return self

    def __next__(self) -> Record:
        if self._records is None:
            self._records = self._page_records(self.first_page)

        while True:
            for record in self._records:
                return record

            page = self._advance()
            if page is None:
                raise StopIteration
            self._records = self._page_records(page)

    def _advance(self) -> dict[str, Any] | None:
        """Получить следующую страницу или None, если обход закончен."""
        page_number = self._next_page
        if page_number is None:
            return None

        total_pages = self.total_pages
        if page_number < total_pages:
            self._next_page = page_number + 1
            return self._fetch(page_number)

        self._next_page = None
        if total_pages < 2:
            # Единственная страница уже отдана как первая
            return None
        return self.last_page

    def _page_records(self, page: dict[str, Any]) -> Iterator[Record]:
        return iter(page.get(self._data_key) or [])
