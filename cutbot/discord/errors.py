from __future__ import annotations

from datetime import datetime
import logging
from typing import Any

import discord
from discord import app_commands

from cutbot.api.errors import (
    ApiError,
    ClientError,
    DecodeError,
    ServerError,
    TransportError,
    format_user_friendly_error,
    parse_error_message,
)
from cutbot.config.models import admin_ids

from .embeds import build_error_embed


# Backend error codes with a dedicated hint; everything else falls back to the
# HTTP status of the ClientError.
CODE_SUGGESTIONS: dict[str, list[str]] = {
    "USER_NOT_FOUND": [
        "Check username spelling (case-sensitive)",
        "Use /ladder to see all registered players",
        "Register missing players with /inputuser",
    ],
    "USER_EXISTS": [
        "Check if the username is already registered with /ladder",
        "Use a different username",
    ],
    "DISCORD_ALREADY_LINKED": [
        "This Discord user is already registered",
        "Use /stats to find their username",
    ],
    "SAME_PLAYER": ["Winner and loser must be different players"],
    "MATCH_NOT_FOUND": ["Use /history to look up the match ID"],
}

STATUS_SUGGESTIONS: dict[int, list[str]] = {
    400: ["Check the values you entered and try again"],
    401: ["API key mismatch between bot and backend", "Check that API_KEY matches on both sides"],
    403: ["API key mismatch between bot and backend", "Check that API_KEY matches on both sides"],
    404: ["Check username spelling (case-sensitive)", "Use /ladder to see all registered players"],
    409: ["The entry already exists; use /ladder or /stats to look it up"],
}


def suggestions_for(error: Exception) -> list[str]:
    """
    Pick user-facing hints from the error kind, backend code and HTTP status.
    """
    if isinstance(error, ClientError):
        if error.code and error.code.upper() in CODE_SUGGESTIONS:
            return list(CODE_SUGGESTIONS[error.code.upper()])
        return list(STATUS_SUGGESTIONS.get(error.status_code or 0, []))
    if isinstance(error, (ServerError, TransportError)):
        return ["The backend may be restarting; try again in a minute", "Contact a system administrator"]
    if isinstance(error, DecodeError):
        return ["Contact a system administrator"]
    return []


def build_api_error_embed(error: Exception, fallback: str) -> discord.Embed:
    """
    Red error embed for a failed backend call. Client errors show the backend
    message verbatim; infrastructure failures show a generic message.
    """
    message = format_user_friendly_error(error) if isinstance(error, ApiError) else fallback
    if isinstance(error, (ServerError, TransportError)):
        message = f"{fallback}: {message}"
    return build_error_embed(message or fallback, suggestions_for(error))


async def send_error(interaction: discord.Interaction, embed: discord.Embed) -> None:
    """Reply, edit the deferred reply, or follow up, whichever the interaction allows."""
    if not interaction.response.is_done():
        await interaction.response.send_message(embed=embed, ephemeral=True)
    else:
        await interaction.followup.send(embed=embed, ephemeral=True)


async def notify_admin_error(
    discord_bot: discord.Client,
    config: dict[str, Any],
    error: Exception,
    context: str = "",
) -> None:
    """
    Send a concise error notification to all configured admins.
    """
    try:
        ids = admin_ids(config)
        if not ids:
            return

        msg = (
            "🤖 **Bot Error Notification**\n"
            f"⏰ Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
            f"📝 Context: {context}\n\nError: {parse_error_message(error)}"
        )
        for admin_id in ids:
            try:
                user = discord_bot.get_user(admin_id) or await discord_bot.fetch_user(
                    admin_id
                )
                await user.send(msg)
            except discord.HTTPException as e:
                logging.warning("Could not notify admin %s: %s", admin_id, e)
    except Exception as e:  # noqa: BLE001
        logging.warning("Failed to notify admins: %s", e)


async def handle_app_command_error(
    interaction: discord.Interaction,
    error: Exception,
    discord_bot: discord.Client,
    config: dict[str, Any],
) -> None:
    """
    Standard handler for slash command errors that escaped the command body.
    """
    original = error.original if isinstance(error, app_commands.CommandInvokeError) else error
    command_name = getattr(interaction.command, "name", "unknown")

    if isinstance(original, app_commands.CheckFailure):
        logging.info("Check failed for /%s by %s: %s", command_name, interaction.user, original)
        embed = build_error_embed(
            "You don't have permission to use this command.",
            ["Contact a server administrator for assistance"],
        )
    else:
        logging.exception("App command error in /%s: %s", command_name, original, exc_info=original)
        await notify_admin_error(discord_bot, config, original, f"App command error: /{command_name}")
        if isinstance(original, ApiError):
            embed = build_api_error_embed(original, "The command failed")
        else:
            embed = build_error_embed("An error occurred while executing this command. Admins have been notified.")

    try:
        await send_error(interaction, embed)
    except discord.HTTPException as e:
        logging.warning("Could not report error for /%s: %s", command_name, e)
