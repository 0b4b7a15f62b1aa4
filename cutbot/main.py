"""
Entrypoint: `python -m cutbot.main` or the `cutbot` console script.

Loads config, sets up logging, opens the single LadderApiClient and hands it
to the slash commands, then connects to the Discord gateway.
"""

from __future__ import annotations

import asyncio
import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
from typing import Any

import discord
from discord.ext import commands

from cutbot.api.client import LadderApiClient
from cutbot.config.loader import get_config
from cutbot.config.models import ApiSettings
from cutbot.discord.commands import register_commands
from cutbot.discord.errors import handle_app_command_error

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def setup_logging(config: dict[str, Any]) -> None:
    level = str(config.get("log_level") or "INFO").upper()
    if os.environ.get("DEBUG"):
        level = "DEBUG"
        logging.getLogger("httpx").setLevel(logging.DEBUG)
    else:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)

    if log_dir := config.get("log_dir"):
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        root = logging.getLogger()
        for name, file_level in (("error.log", logging.ERROR), ("combined.log", logging.NOTSET)):
            handler = RotatingFileHandler(
                path / name, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
            )
            handler.setLevel(file_level)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)


def build_bot(config: dict[str, Any], api: LadderApiClient) -> commands.Bot:
    intents = discord.Intents.default()
    activity = discord.CustomActivity(name=(config.get("status_message") or "CUT Ladder • /help")[:128])
    discord_bot = commands.Bot(intents=intents, activity=activity, command_prefix=commands.when_mentioned)

    register_commands(discord_bot.tree, api, config)

    @discord_bot.tree.error
    async def on_app_command_error(interaction: discord.Interaction, error: discord.app_commands.AppCommandError) -> None:
        await handle_app_command_error(interaction, error, discord_bot, config)

    synced = False

    @discord_bot.event
    async def on_ready() -> None:
        nonlocal synced
        logging.info(f"Bot logged in as {discord_bot.user} (id {discord_bot.user.id})")
        logging.info(f"Serving {len(discord_bot.guilds)} guild(s)")
        if client_id := config.get("client_id"):
            logging.info(f"\n\nBOT INVITE URL:\nhttps://discord.com/oauth2/authorize?client_id={client_id}&permissions=2147485696&scope=bot%20applications.commands\n")
        if synced:
            return
        if guild_id := config.get("guild_id"):
            guild = discord.Object(id=guild_id)
            discord_bot.tree.copy_global_to(guild=guild)
            cmds = await discord_bot.tree.sync(guild=guild)
            logging.info(f"Synced {len(cmds)} guild commands to {guild_id}")
        else:
            cmds = await discord_bot.tree.sync()
            logging.info(f"Synced {len(cmds)} global commands")
        synced = True

    return discord_bot


async def run_bot(config: dict[str, Any] | None = None) -> None:
    config = config or get_config()
    settings = ApiSettings.from_config(config)
    logging.info(
        f"🚀 Bot starting | backend: {settings.base_url} | timeout: {settings.timeout_ms}ms | "
        f"retry: {settings.retry.max_attempts} attempts, base {settings.retry.base_delay_ms}ms"
    )
    async with LadderApiClient(settings) as api:
        discord_bot = build_bot(config, api)
        async with discord_bot:
            await discord_bot.start(config["bot_token"])


def main() -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    config = get_config()
    setup_logging(config)
    try:
        asyncio.run(run_bot(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
