from __future__ import annotations

from typing import Any, Iterable

import discord
from discord import app_commands

from cutbot.config.models import admin_ids, admin_roles


def has_admin_role(member: Any, roles: Iterable[str]) -> bool:
    """True if `member` carries any of the named roles. DM users have no roles."""
    wanted = set(roles)
    return any(getattr(role, "name", None) in wanted for role in getattr(member, "roles", ()))


def is_ladder_admin(user: Any, config: dict[str, Any]) -> bool:
    return user.id in admin_ids(config) or has_admin_role(user, admin_roles(config))


def ladder_admin_only(config: dict[str, Any]):
    """
    app_commands check: configured admin user ids, or a member holding one of
    permissions.admin_roles.
    """
    def predicate(interaction: discord.Interaction) -> bool:
        if is_ladder_admin(interaction.user, config):
            return True
        raise app_commands.CheckFailure(
            f"/{getattr(interaction.command, 'name', '?')} requires one of: {', '.join(admin_roles(config))}"
        )

    return app_commands.check(predicate)


def can_delete_matches(interaction: discord.Interaction) -> bool:
    perms = interaction.permissions
    return bool(perms and perms.administrator)
