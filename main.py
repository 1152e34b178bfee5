"""Пример использования Dotypos API клиента."""

import logging
from itertools import islice

from dotypos import DotyposApiClientManager, get_dotypos_config

# Настраиваем логирование
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def save_token(manager: DotyposApiClientManager) -> None:
    """Обновить токен и сохранить его (здесь — просто вывести)."""
    manager.access_token = manager.new_access_token()
    print("Получен новый access-токен")


def main() -> None:
    """Основная функция."""
    # Загружаем конфигурацию из config.yml
    config = get_dotypos_config()
    print(f"Подключение к облаку: {config.cloud_id}")

    with DotyposApiClientManager.from_config(config, on_token_error=save_token) as manager:
        if not manager.valid_credentials():
            print("Учетные данные недействительны")
            return

        products = manager.products()
        print(f"\nТовары ({len(products)} шт.):")
        for product in islice(products, 5):  # Показываем первые 5
            print(f"  - {product.get('name')} (id: {product.get('id')})")


if __name__ == "__main__":
    main()
