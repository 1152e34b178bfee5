"""Модуль для работы с Dotypos API.

Предоставляет клиента с обновлением access-токена при 403
и ленивым постраничным обходом списков.

Пример использования:
    from dotypos import get_dotypos_config, DotyposApiClientManager

    config = get_dotypos_config()
    with DotyposApiClientManager.from_config(config) as manager:
        products = manager.products()
        print(len(products))
        for product in products:
            ...
"""

from dotypos.api_client_manager import (
    ApiCredentials,
    DotyposApiClientManager,
    OutcomeKind,
    RequestOutcome,
    refresh_access_token,
)
from dotypos.config_reader import (
    DotyposConfig,
    get_config,
    get_dotypos_config,
    parse_config_file,
)
from dotypos.exceptions import (
    AccessTokenRejected,
    DotyposAuthException,
    DotyposException,
    RefreshTokenExpired,
    UnknownError,
)
from dotypos.pagination import ApiEnumerator
from dotypos.token_manager import TokenManager

__all__ = [
    # API Client Manager
    "ApiCredentials",
    "DotyposApiClientManager",
    "OutcomeKind",
    "RequestOutcome",
    "refresh_access_token",
    # Pagination
    "ApiEnumerator",
    # Configuration
    "DotyposConfig",
    "get_config",
    "get_dotypos_config",
    "parse_config_file",
    # Exceptions
    "AccessTokenRejected",
    "DotyposAuthException",
    "DotyposException",
    "RefreshTokenExpired",
    "UnknownError",
    # Token Management
    "TokenManager",
]
