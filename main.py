# main.py

import asyncio
import signal
import sys

from source_query.config import Config
from source_query.errors import SourceQueryError
from source_query.logger import Logger
from source_query.query_client.query_client import QueryClient


class MainApp:
    def __init__(self, config=None, logger=None):
        self.config = config or Config()
        self.logger = logger or Logger(self.config)
        self.tasks = []
        self.results = {}

    async def query_server(self, host_and_port):
        """
        Опрашивает один сервер. Ошибка протокола/сети не прерывает опрос остальных.
        :return: ServerInfo или None
        """
        try:
            client = QueryClient(host_and_port, self.config.query_timeout)
            info = await client.query_info()
        except ValueError as e:
            self.logger.error(f"Некорректный адрес сервера {host_and_port}: {e}")
            return None
        except SourceQueryError as e:
            self.logger.error(f"Сервер {host_and_port} не ответил: {type(e).__name__}: {e}")
            return None
        self.results[host_and_port] = info
        return info

    async def run(self, servers=None):
        servers = servers or self.config.servers
        if not servers:
            self.logger.error("Не найдено ни одного сервера в конфиге. Выход.")
            return {}

        self.logger.info(f"Опрашиваю серверы: {', '.join(servers)}")
        # Каждый запрос - отдельная задача со своим сокетом
        self.tasks = [asyncio.create_task(self.query_server(server)) for server in servers]
        await asyncio.gather(*self.tasks)

        for server, info in self.results.items():
            self.logger.info(
                f"{server}: {info.name} | map={info.map} | players={info.players}/{info.max_players} "
                f"bots={info.bots} | game={info.game} ({info.app_id}) | version={info.version} "
                f"| vac={info.vac_enabled} password={info.password_protected}")
        self.logger.info(f"Ответили {len(self.results)} из {len(servers)} серверов.")
        return self.results

    def shutdown(self):
        for task in self.tasks:
            task.cancel()


async def main(argv=None):
    app = MainApp()
    loop = asyncio.get_running_loop()

    def handle_shutdown(signum, frame):
        app.logger.info(f"Received shutdown signal {signum}. Shutting down...")
        loop.call_soon_threadsafe(app.shutdown)

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)

    try:
        await app.run(argv)
    except asyncio.CancelledError:
        app.logger.info("Опрос прерван.")


if __name__ == "__main__":
    try:
        asyncio.run(main(sys.argv[1:]))
    except (KeyboardInterrupt, SystemExit):
        pass
