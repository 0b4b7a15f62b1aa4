"""
Embed builders for every command response.

All builders take the `data` part of a backend envelope and return a
discord.Embed; none of them talk to the network.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

import discord


COLOR_SUCCESS = discord.Color(0x00FF00)
COLOR_ERROR = discord.Color(0xFF0000)
COLOR_INFO = discord.Color(0x0099FF)
COLOR_WARNING = discord.Color(0xFFAA00)

EMBED_FIELD_LIMIT = 1024
MATCHES_PER_FIELD = 10


def _signed(value: Any) -> str:
    try:
        return f"+{value}" if float(value) >= 0 else str(value)
    except (TypeError, ValueError):
        return str(value)


def _parse_ts(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _fmt_ts(value: Any, fmt: str = "%a, %d %b %Y %H:%M:%S UTC") -> str:
    ts = _parse_ts(value)
    if ts is None:
        return str(value or "unknown")
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.strftime(fmt)


def _add_fields(embed: discord.Embed, fields: Iterable[dict[str, Any]]) -> None:
    for f in fields:
        embed.add_field(name=f["name"], value=str(f["value"])[:EMBED_FIELD_LIMIT], inline=f.get("inline", False))


# ── Generic ─────────────────────────────────────────────────────────────────

def build_success_embed(title: str, description: str = "", fields: Sequence[dict[str, Any]] = ()) -> discord.Embed:
    embed = discord.Embed(title=title, description=description or None, color=COLOR_SUCCESS,
                          timestamp=discord.utils.utcnow())
    _add_fields(embed, fields)
    return embed


def build_error_embed(error: str, suggestions: Sequence[str] = ()) -> discord.Embed:
    embed = discord.Embed(title="❌ Error", description=error, color=COLOR_ERROR, timestamp=discord.utils.utcnow())
    embed.set_footer(text="Use /help for command reference")
    if suggestions:
        embed.add_field(name="Suggestions", value="\n".join(f"• {s}" for s in suggestions), inline=False)
    return embed


def build_info_embed(title: str, description: str = "", fields: Sequence[dict[str, Any]] = ()) -> discord.Embed:
    embed = discord.Embed(title=title, description=description or None, color=COLOR_INFO,
                          timestamp=discord.utils.utcnow())
    _add_fields(embed, fields)
    return embed


def build_warning_embed(title: str, description: str) -> discord.Embed:
    return discord.Embed(title=title, description=description, color=COLOR_WARNING, timestamp=discord.utils.utcnow())


# ── Users ───────────────────────────────────────────────────────────────────

def build_user_created_embed(user: dict[str, Any]) -> discord.Embed:
    return build_success_embed(
        "✅ Player Registered",
        f"Successfully registered **{user.get('username')}** in the ladder system!",
        [
            {
                "name": "Player Details",
                "value": f"Username: {user.get('username')}\nTwitch: {user.get('twitchName')}\n"
                         f"Discord: <@{user.get('discordId')}>",
            },
            {
                "name": "Starting Rating",
                "value": f"Rating: {user.get('rating')}\nRD: {user.get('ratingDeviation')}\n"
                         f"Volatility: {user.get('volatility')}",
            },
        ],
    )


def build_user_deleted_embed(user: dict[str, Any]) -> discord.Embed:
    return build_success_embed(
        "🗑️ Player Removed",
        f"Successfully removed **{user.get('username')}** from the ladder system.",
        [
            {"name": "Note", "value": "Match history has been preserved for data integrity."},
            {"name": "Deleted At", "value": _fmt_ts(user.get("deletedAt"))},
        ],
    )


# ── Matches ─────────────────────────────────────────────────────────────────

def _side(player: dict[str, Any], own: Any, other: Any) -> str:
    return (
        f"**{player.get('username')}**\n"
        f"Score: {own}-{other}\n"
        f"Rating: {player.get('ratingBefore')} → {player.get('ratingAfter')} ({_signed(player.get('ratingChange'))})\n"
        f"Rank: #{player.get('rankBefore')} → #{player.get('rankAfter')}"
    )


def build_match_embed(match: dict[str, Any]) -> discord.Embed:
    winner, loser = match.get("winner") or {}, match.get("loser") or {}
    score = match.get("score") or {}
    weight = match.get("scoreWeight")
    played_at = match.get("playedAt")

    embed = discord.Embed(title="⚔️ Match Recorded", color=COLOR_SUCCESS, timestamp=discord.utils.utcnow())
    embed.add_field(name="Winner", value=_side(winner, score.get("winner"), score.get("loser")), inline=True)
    embed.add_field(name="Loser", value=_side(loser, score.get("loser"), score.get("winner")), inline=True)
    embed.add_field(
        name="Match Details",
        value=f"Score Weight: {weight:.3f}\nPlayed: {_fmt_ts(played_at)}" if isinstance(weight, (int, float))
        else f"Played: {_fmt_ts(played_at)}",
        inline=False,
    )
    embed.set_footer(text=f"Match #{match.get('matchId')} • {played_at or ''}".rstrip(" •"))
    return embed


def _history_line(match: dict[str, Any]) -> str:
    weight = match.get("scoreWeight")
    weight_str = f"{weight:.3f}" if isinstance(weight, (int, float)) else "N/A"
    return (
        f"**#{match.get('matchNumber')}** (ID: {match.get('matchId')}) | {_fmt_ts(match.get('playedAt'), '%Y-%m-%d')}\n"
        f"{match.get('winner')} **{match.get('score')}** {match.get('loser')}\n"
        f"Rating: {_signed(match.get('winnerRatingChange'))} / {_signed(match.get('loserRatingChange'))} | "
        f"Weight: {weight_str}"
    )


def build_history_embed(matches: Sequence[dict[str, Any]], pagination: dict[str, Any]) -> discord.Embed:
    page = int(pagination.get("page", 1))
    limit = int(pagination.get("limit", len(matches) or 1))
    total = int(pagination.get("totalMatches", len(matches)))
    first, last = (page - 1) * limit + 1, min(page * limit, total)

    embed = discord.Embed(
        title="📜 Match History",
        description=f"Showing matches {first}-{last} of {total}" if total else "No matches recorded",
        color=COLOR_INFO,
        timestamp=discord.utils.utcnow(),
    )
    if not matches:
        embed.add_field(
            name="No Matches",
            value="No matches have been recorded yet.\nUse `/recordmatch` to record the first match!",
            inline=False,
        )
    else:
        for i in range(0, len(matches), MATCHES_PER_FIELD):
            value = "\n\n".join(_history_line(m) for m in matches[i:i + MATCHES_PER_FIELD])
            embed.add_field(name="Matches" if i == 0 else "\u200b", value=value[:EMBED_FIELD_LIMIT], inline=False)

    embed.set_footer(text=f"Page {page} of {pagination.get('totalPages', 1)} • Total Matches: {total}")
    return embed


def build_match_deleted_embed(result: dict[str, Any]) -> discord.Embed:
    deleted = result.get("deletedMatch") or {}
    recalculation = result.get("recalculation") or {}
    embed = build_success_embed(
        "✅ Match Deleted Successfully",
        "The match has been deleted and all ratings have been recalculated.",
        [
            {
                "name": "Deleted Match",
                "value": f"**ID:** {deleted.get('id')}\n"
                         f"**Match:** {deleted.get('winner')} vs {deleted.get('loser')}\n"
                         f"**Score:** {deleted.get('score')}\n"
                         f"**Date:** {_fmt_ts(deleted.get('playedAt'))}",
            },
            {
                "name": "Recalculation Results",
                "value": f"**Matches Processed:** {recalculation.get('matchesProcessed')}/"
                         f"{recalculation.get('totalMatches')}\n"
                         f"**Status:** {'✅ Success' if recalculation.get('success') else '❌ Failed'}",
            },
        ],
    )
    if errors := recalculation.get("errors"):
        embed.add_field(
            name="⚠️ Errors",
            value=f"{len(errors)} error(s) occurred during recalculation. Check logs for details.",
            inline=False,
        )
    return embed


# ── Stats / ladder ──────────────────────────────────────────────────────────

def build_stats_embed(stats: dict[str, Any], detailed: bool = False) -> discord.Embed:
    user = stats.get("user") or {}
    rating = stats.get("rating") or {}
    record = stats.get("record") or {}
    form = stats.get("recentForm") or {}
    streak = (stats.get("streaks") or {}).get("current") or {}

    embed = discord.Embed(
        title=f"📊 {user.get('username')}'s Statistics", color=COLOR_INFO, timestamp=discord.utils.utcnow()
    )
    embed.add_field(
        name="Overview",
        value=f"Rank: #{user.get('rank')} of {user.get('totalPlayers')}\n"
              f"Rating: {rating.get('current')} (RD: {rating.get('deviation')})\n"
              f"Record: {record.get('wins')}-{record.get('losses')} ({record.get('winPercentage')}%)",
        inline=False,
    )

    if detailed:
        embed.add_field(
            name="Performance",
            value=f"Total Matches: {record.get('totalMatches')}\nWin %: {record.get('winPercentage')}%\n"
                  f"Rating Trend: {rating.get('trend')}",
            inline=True,
        )
        embed.add_field(
            name="Recent Form",
            value=f"Last 5: {form.get('last5') or 'N/A'}\nLast 10: {form.get('last10') or 'N/A'}",
            inline=True,
        )
        count = int(streak.get("count") or 0)
        if count > 0:
            embed.add_field(
                name="Current Streak",
                value=f"{count} {streak.get('type')}{'s' if count > 1 else ''}",
                inline=True,
            )
    else:
        embed.add_field(name="Recent Form", value=f"Last 5: {form.get('last5') or 'N/A'}", inline=False)

    return embed


def format_ladder_table(players: Sequence[dict[str, Any]]) -> str:
    rows = []
    for p in players:
        rows.append(
            f"#{str(p.get('rank')).rjust(2)} {str(p.get('username')).ljust(15)} "
            f"{float(p.get('rating') or 0):4.0f} {p.get('wins') or 0}-{p.get('losses') or 0} "
            f"{float(p.get('ratingDeviation') or 0):3.0f}"
        )
    return "\n".join(rows)


def build_ladder_embed(ladder: dict[str, Any]) -> discord.Embed:
    players = ladder.get("players") or []
    pagination = ladder.get("pagination") or {}
    page, total_pages = pagination.get("page", 1), pagination.get("totalPages", 1)

    embed = discord.Embed(
        title="🏆 CUT Ladder Rankings",
        description=f"Page {page} of {total_pages} • {pagination.get('totalPlayers', len(players))} Players",
        color=COLOR_INFO,
        timestamp=discord.utils.utcnow(),
    )
    if not players:
        embed.description = "No players registered yet. Use `/inputuser` to register!"
        return embed

    table = format_ladder_table(players)
    embed.add_field(name="Rank | Username | Rating | W-L | RD", value=f"```\n{table}\n```"[:EMBED_FIELD_LIMIT], inline=False)
    if total_pages > 1:
        embed.set_footer(text=f"Page {page}/{total_pages} • Use buttons to navigate")
    return embed


# ── Help ────────────────────────────────────────────────────────────────────

def build_help_embed() -> discord.Embed:
    return build_info_embed(
        "📖 CUTBot Command Reference",
        "Chosen Undead Tournament Ladder System",
        [
            {
                "name": "👥 User Management",
                "value": "\n".join([
                    "`/inputuser` - Register a new player (Admin only)",
                    "`/deleteuser` - Remove a player (Admin only)",
                    "`/mystats` - View your personal statistics",
                ]),
            },
            {
                "name": "⚔️ Match Recording",
                "value": "\n".join([
                    "`/recordmatch` - Record a match result",
                    "  • Winner and loser usernames",
                    "  • Scores (winner: 1-10, loser: 0-9)",
                    "  • Ratings are updated by the ladder backend",
                ]),
            },
            {
                "name": "📊 Statistics & Rankings",
                "value": "\n".join([
                    "`/stats <username>` - View any player's statistics",
                    "`/ladder` - View ladder rankings (paginated)",
                    "`/history` - View all recorded matches (paginated)",
                ]),
            },
            {
                "name": "💡 Tips",
                "value": "\n".join([
                    "• Use autocomplete for usernames in commands",
                    "• Match history is preserved even if users are deleted",
                    "• Contact a CUT Admin or Moderator for registration",
                ]),
            },
        ],
    )
