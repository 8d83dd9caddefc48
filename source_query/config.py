# source_query/config.py

import json
import os

from source_query.constants import DEFAULT_TIMEOUT

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "config.json")


class Config:

    def __init__(self, config_path=None):
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = json.load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Конфигурационный файл не найден: {self.config_path}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Ошибка парсинга JSON в конфиге: {e}")

    def get(self, key, default=None):
        """
        Общий безопасный доступ к любому полю.
        Поддерживает вложенные ключи через точку (например, "LOG.LEVEL_FILE_LOG").
        """
        keys = key.split('.')
        value = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default

    @property
    def query_timeout(self):
        """Таймаут на весь обмен A2S_INFO в секундах"""
        return float(self.get("QUERY.TIMEOUT", DEFAULT_TIMEOUT))

    @property
    def servers(self):
        """Список адресов "host:port" для опроса"""
        servers = self.get("SERVERS", [])
        if isinstance(servers, str):
            servers = [servers]
        return list(servers)
