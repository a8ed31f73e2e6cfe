from __future__ import annotations

import logging

import discord
from discord.ext import commands
from dotenv import load_dotenv

from .commands import register_commands
from .config import Config, load_config
from .db import Database
from .dispatcher import Dispatcher
from .ledger import Ledger
from .models import StatusMessage
from .reporter import Reporter
from .state import AppState
from .store import Store
from .timeconv import local_today


class LedgerBot(commands.Bot):
    def __init__(self, config: Config, db: Database) -> None:
        intents = discord.Intents.none()
        intents.guilds = True

        super().__init__(command_prefix="!", intents=intents)

        self.config = config
        self.db = db
        self.ledger = Ledger(Store(db))
        self.dispatcher = Dispatcher(self.ledger, tz=config.timezone)
        self.reporter = Reporter(tz=config.timezone)

        self.logger = logging.getLogger("zeiterfassung-bot")

        # Cached snapshot for rendering; replaced after every dispatched intent.
        self.state = AppState.load(self.ledger, local_today(config.timezone))

    async def setup_hook(self) -> None:
        register_commands(self)
        await self.tree.sync(guild=discord.Object(id=self.config.guild_id))

    async def on_ready(self) -> None:
        self.logger.info("Connected as %s (%s)", self.user, self.user.id if self.user else "unknown")
        self.logger.info("Ledger loaded with %d sessions", len(self.state.sessions))

    def handle(self, intent: object) -> StatusMessage:
        result = self.dispatcher.dispatch(self.state, intent)
        self.state = result.state
        if not result.status.ok:
            self.logger.info("%s rejected: %s", type(intent).__name__, result.status.text)
        return result.status

    async def close(self) -> None:
        self.db.close()
        await super().close()


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def main() -> None:
    load_dotenv()
    configure_logging()

    config = load_config()
    db = Database(config.db_path)
    db.initialize()

    bot = LedgerBot(config=config, db=db)
    bot.run(config.discord_token)


if __name__ == "__main__":
    main()
