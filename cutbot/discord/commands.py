"""
Slash commands for the ladder bot.

`register_commands` attaches every command to a bot's tree, closing over the
single LadderApiClient built at start-up. Handlers validate input, call the
client, and render the result; API failures become error embeds here, any
other exception goes to the tree error handler.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import discord
from discord import app_commands
from discord.app_commands import Choice

from cutbot.api.client import LadderApiClient
from cutbot.api.errors import ApiError, ClientError

from .checks import can_delete_matches, ladder_admin_only
from .embeds import (
    build_error_embed,
    build_help_embed,
    build_history_embed,
    build_ladder_embed,
    build_match_embed,
    build_stats_embed,
    build_user_created_embed,
    build_user_deleted_embed,
)
from .errors import build_api_error_embed, send_error
from .views import HISTORY_PAGE_SIZE, LADDER_PAGE_SIZE, HistoryView, LadderView


AUTOCOMPLETE_LIMIT = 25  # Discord hard limit


def filter_usernames(users: Iterable[dict[str, Any]], current: str, limit: int = AUTOCOMPLETE_LIMIT) -> list[str]:
    """Usernames containing `current` (case-insensitive), at most `limit`."""
    needle = current.lower()
    names = [str(u["username"]) for u in users if isinstance(u, dict) and u.get("username")]
    return [n for n in names if needle in n.lower()][:limit]


def validate_match_input(winner: str, loser: str, winner_score: int, loser_score: int) -> Optional[tuple[str, list[str]]]:
    """Returns (error, suggestions) for an invalid match, None when it can be sent."""
    if winner_score <= loser_score:
        return (
            "Invalid scores: Winner score must be greater than loser score",
            [f"You entered: {winner} {winner_score}, {loser} {loser_score}", "Winner score must be higher"],
        )
    if winner.lower() == loser.lower():
        return (
            "Invalid match: Winner and loser must be different players",
            ["Please select two different players"],
        )
    return None


async def find_username_by_discord_id(api: LadderApiClient, discord_id: int) -> Optional[str]:
    """
    The user list omits Discord ids, so look each user up until one matches.
    Lookups that fail with a client error are skipped.
    """
    users = (await api.list_users()).data or []
    for u in users:
        username = u.get("username") if isinstance(u, dict) else None
        if not username:
            continue
        try:
            details = (await api.get_user(username)).data or {}
        except ClientError as e:
            logging.debug(f"Skipping {username} while resolving Discord id: {e}")
            continue
        if str(details.get("discordId")) == str(discord_id):
            return username
    return None


def username_autocompleter(api: LadderApiClient):
    """Autocomplete callback over registered usernames; empty on any API failure."""
    async def username_autocomplete(interaction: discord.Interaction, current: str) -> list[Choice[str]]:
        try:
            users = (await api.list_users()).data or []
        except ApiError as e:
            logging.warning(f"Autocomplete lookup failed: {e}")
            return []
        return [Choice(name=n, value=n) for n in filter_usernames(users, current)]

    return username_autocomplete


def register_commands(tree: app_commands.CommandTree, api: LadderApiClient, config: dict[str, Any]) -> None:
    admin_only = ladder_admin_only(config)
    username_autocomplete = username_autocompleter(api)

    async def reply_api_error(interaction: discord.Interaction, error: ApiError, fallback: str) -> None:
        logging.warning(f"/{getattr(interaction.command, 'name', '?')} failed: {error}")
        await send_error(interaction, build_api_error_embed(error, fallback))

    # ── Users ───────────────────────────────────────────────────────────────

    @tree.command(name="inputuser", description="Register a new player in the ladder system")
    @app_commands.describe(
        username="In-game username (3-20 characters, alphanumeric + underscore)",
        twitch_name="Twitch username",
        discord_mention="Discord user to link",
    )
    @app_commands.default_permissions(administrator=True)
    @admin_only
    async def input_user_command(
        interaction: discord.Interaction,
        username: app_commands.Range[str, 3, 20],
        twitch_name: app_commands.Range[str, 3, 25],
        discord_mention: discord.User,
    ) -> None:
        logging.info(f"/inputuser: {username}, {twitch_name}, {discord_mention} by {interaction.user.id}")
        await interaction.response.defer(thinking=True)
        try:
            resp = await api.create_user(username, twitch_name, discord_mention.id)
        except ApiError as e:
            await reply_api_error(interaction, e, "Failed to register player")
            return
        await interaction.followup.send(embed=build_user_created_embed(resp.data or {}))

    @tree.command(name="deleteuser", description="Remove a player from the ladder system")
    @app_commands.describe(username="Username to delete")
    @app_commands.default_permissions(administrator=True)
    @app_commands.autocomplete(username=username_autocomplete)
    @admin_only
    async def delete_user_command(interaction: discord.Interaction, username: str) -> None:
        logging.info(f"/deleteuser: {username} by {interaction.user.id}")
        await interaction.response.defer(thinking=True)
        try:
            resp = await api.delete_user(username)
        except ApiError as e:
            await reply_api_error(interaction, e, "Failed to delete player")
            return
        await interaction.followup.send(embed=build_user_deleted_embed(resp.data or {"username": username}))

    # ── Matches ─────────────────────────────────────────────────────────────

    @tree.command(name="recordmatch", description="Record a match result and update ratings")
    @app_commands.describe(
        winner="Winner username",
        loser="Loser username",
        winner_score="Winner score (1-10)",
        loser_score="Loser score (0-9)",
    )
    @app_commands.autocomplete(winner=username_autocomplete, loser=username_autocomplete)
    async def record_match_command(
        interaction: discord.Interaction,
        winner: str,
        loser: str,
        winner_score: app_commands.Range[int, 1, 10],
        loser_score: app_commands.Range[int, 0, 9],
    ) -> None:
        logging.info(f"/recordmatch: {winner} vs {loser}, score {winner_score}-{loser_score}")
        if invalid := validate_match_input(winner, loser, winner_score, loser_score):
            message, suggestions = invalid
            await interaction.response.send_message(embed=build_error_embed(message, suggestions), ephemeral=True)
            return

        await interaction.response.defer(thinking=True)
        try:
            resp = await api.record_match(winner, loser, winner_score, loser_score)
        except ApiError as e:
            await reply_api_error(interaction, e, "Failed to record match")
            return
        logging.info(f"/recordmatch: recorded match {(resp.data or {}).get('matchId')} in {resp.attempts} attempt(s)")
        await interaction.followup.send(embed=build_match_embed(resp.data or {}))

    @tree.command(name="history", description="View all recorded matches in chronological order")
    async def history_command(interaction: discord.Interaction) -> None:
        logging.info(f"/history: {interaction.user.id}")
        await interaction.response.defer(thinking=True)
        try:
            resp = await api.list_matches(1, HISTORY_PAGE_SIZE)
        except ApiError as e:
            await reply_api_error(interaction, e, "Failed to fetch match history")
            return

        data = resp.data or {}
        pagination = data.get("pagination") or {}
        embed = build_history_embed(data.get("matches") or [], pagination)
        allow_delete = can_delete_matches(interaction)
        if pagination.get("totalPages", 1) > 1 or allow_delete:
            view = HistoryView(api, pagination.get("totalPages", 1), allow_delete=allow_delete)
            view.message = await interaction.followup.send(embed=embed, view=view, wait=True)
        else:
            await interaction.followup.send(embed=embed)

    # ── Stats / ladder ──────────────────────────────────────────────────────

    @tree.command(name="stats", description="View statistics for any player")
    @app_commands.describe(username="Player username")
    @app_commands.autocomplete(username=username_autocomplete)
    async def stats_command(interaction: discord.Interaction, username: str) -> None:
        logging.info(f"/stats: {username}")
        await interaction.response.defer(thinking=True)
        try:
            resp = await api.get_user_stats(username)
        except ApiError as e:
            await reply_api_error(interaction, e, "Failed to fetch player statistics")
            return
        await interaction.followup.send(embed=build_stats_embed(resp.data or {}, detailed=False))

    @tree.command(name="mystats", description="View your personal statistics and match history")
    async def my_stats_command(interaction: discord.Interaction) -> None:
        logging.info(f"/mystats: {interaction.user} ({interaction.user.id})")
        await interaction.response.defer(thinking=True)
        try:
            username = await find_username_by_discord_id(api, interaction.user.id)
            if username is None:
                await interaction.followup.send(embed=build_error_embed(
                    "You are not registered in the ladder system",
                    [
                        "Ask a CUT Admin or Moderator to register you with /inputuser",
                        "You need to be registered before you can view your stats",
                    ],
                ))
                return
            resp = await api.get_user_stats(username)
        except ApiError as e:
            await reply_api_error(interaction, e, "Failed to fetch your statistics")
            return
        await interaction.followup.send(embed=build_stats_embed(resp.data or {}, detailed=True))

    @tree.command(name="ladder", description="View the current ladder rankings")
    async def ladder_command(interaction: discord.Interaction) -> None:
        logging.info(f"/ladder: {interaction.user.id}")
        await interaction.response.defer(thinking=True)
        try:
            resp = await api.get_ladder(1, LADDER_PAGE_SIZE)
        except ApiError as e:
            await reply_api_error(interaction, e, "Failed to fetch ladder standings")
            return

        data = resp.data or {}
        total_pages = (data.get("pagination") or {}).get("totalPages", 1)
        embed = build_ladder_embed(data)
        if total_pages > 1:
            view = LadderView(api, total_pages, owner_id=interaction.user.id)
            view.message = await interaction.followup.send(embed=embed, view=view, wait=True)
        else:
            await interaction.followup.send(embed=embed)

    @tree.command(name="help", description="Display command help and usage information")
    async def help_command(interaction: discord.Interaction) -> None:
        logging.info(f"/help: {interaction.user.id}")
        await interaction.response.send_message(embed=build_help_embed())

    logging.info(f"Registered {len(tree.get_commands())} slash commands")
