"""
Interactive components: previous/next pagination for /ladder and /history,
and the admin-only delete-match modal reachable from /history.
"""

from __future__ import annotations

import logging
from typing import Optional

import discord

from cutbot.api.client import LadderApiClient
from cutbot.api.errors import ApiError

from .checks import can_delete_matches
from .embeds import (
    build_error_embed,
    build_history_embed,
    build_ladder_embed,
    build_match_deleted_embed,
    build_warning_embed,
)
from .errors import build_api_error_embed


PAGE_TIMEOUT_SECONDS = 300
LADDER_PAGE_SIZE = 25
HISTORY_PAGE_SIZE = 25
CONFIRM_WORD = "CONFIRM"


def parse_match_id(text: str) -> Optional[int]:
    """Positive integer match id from free-form modal input, else None."""
    try:
        value = int(text.strip())
    except (AttributeError, ValueError):
        return None
    return value if value >= 1 else None


class PaginatedView(discord.ui.View):
    """
    Previous/next buttons over a backend-paginated listing.

    Subclasses implement `fetch_page(page) -> (embed, total_pages)`.
    When `owner_id` is set only that user may turn pages.
    """

    def __init__(self, api: LadderApiClient, total_pages: int, page: int = 1, owner_id: Optional[int] = None):
        super().__init__(timeout=PAGE_TIMEOUT_SECONDS)
        self.api = api
        self.page = page
        self.total_pages = max(1, int(total_pages))
        self.owner_id = owner_id
        self.message: Optional[discord.Message] = None
        self._sync_buttons()

    async def fetch_page(self, page: int) -> tuple[discord.Embed, int]:
        raise NotImplementedError

    def _sync_buttons(self) -> None:
        self.previous_button.disabled = self.page <= 1
        self.next_button.disabled = self.page >= self.total_pages

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if self.owner_id is None or interaction.user.id == self.owner_id:
            return True
        await interaction.response.send_message(
            "Only the person who ran the command can change pages.", ephemeral=True
        )
        return False

    async def _turn(self, interaction: discord.Interaction, page: int) -> None:
        await interaction.response.defer()
        logging.info(f"{type(self).__name__}: page {self.page} -> {page} by {interaction.user.id}")
        try:
            embed, total_pages = await self.fetch_page(page)
        except ApiError as e:
            logging.warning(f"{type(self).__name__}: failed to load page {page}: {e}")
            await interaction.followup.send(embed=build_api_error_embed(e, "Failed to load page"), ephemeral=True)
            return
        self.page, self.total_pages = page, max(1, int(total_pages))
        self._sync_buttons()
        await interaction.edit_original_response(embed=embed, view=self)

    @discord.ui.button(label="◀ Previous", style=discord.ButtonStyle.primary)
    async def previous_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._turn(interaction, self.page - 1)

    @discord.ui.button(label="Next ▶", style=discord.ButtonStyle.primary)
    async def next_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self._turn(interaction, self.page + 1)

    async def on_timeout(self) -> None:
        for item in self.children:
            if isinstance(item, discord.ui.Button):
                item.disabled = True
        if self.message is not None:
            try:
                await self.message.edit(view=self)
            except discord.HTTPException as e:
                logging.debug(f"Could not disable expired pagination buttons: {e}")


class LadderView(PaginatedView):
    async def fetch_page(self, page: int) -> tuple[discord.Embed, int]:
        resp = await self.api.get_ladder(page, LADDER_PAGE_SIZE)
        data = resp.data or {}
        return build_ladder_embed(data), (data.get("pagination") or {}).get("totalPages", 1)


class HistoryView(PaginatedView):
    def __init__(self, api: LadderApiClient, total_pages: int, page: int = 1, allow_delete: bool = False):
        super().__init__(api, total_pages, page)
        if allow_delete:
            self.add_item(DeleteMatchButton(api))

    async def fetch_page(self, page: int) -> tuple[discord.Embed, int]:
        resp = await self.api.list_matches(page, HISTORY_PAGE_SIZE)
        data = resp.data or {}
        pagination = data.get("pagination") or {}
        return build_history_embed(data.get("matches") or [], pagination), pagination.get("totalPages", 1)


class DeleteMatchButton(discord.ui.Button):
    def __init__(self, api: LadderApiClient):
        super().__init__(label="🗑️ Delete Match", style=discord.ButtonStyle.danger, row=1)
        self.api = api

    async def callback(self, interaction: discord.Interaction) -> None:
        if not can_delete_matches(interaction):
            await interaction.response.send_message(
                embed=build_error_embed("Only server administrators can delete matches."), ephemeral=True
            )
            return
        await interaction.response.send_modal(DeleteMatchModal(self.api))


class DeleteMatchModal(discord.ui.Modal, title="Delete Match"):
    match_id = discord.ui.TextInput(
        label="Match ID to delete",
        placeholder="Enter the match ID number",
        style=discord.TextStyle.short,
        required=True,
        max_length=12,
    )
    confirm = discord.ui.TextInput(
        label=f"Type {CONFIRM_WORD} to proceed",
        placeholder=CONFIRM_WORD,
        style=discord.TextStyle.short,
        required=True,
        max_length=len(CONFIRM_WORD),
    )

    def __init__(self, api: LadderApiClient):
        super().__init__()
        self.api = api

    async def on_submit(self, interaction: discord.Interaction) -> None:
        if self.confirm.value != CONFIRM_WORD:
            await interaction.response.send_message(
                embed=build_warning_embed("Deletion Cancelled", f"You must type {CONFIRM_WORD} to delete a match."),
                ephemeral=True,
            )
            return

        match_id = parse_match_id(self.match_id.value)
        if match_id is None:
            await interaction.response.send_message(
                embed=build_error_embed("Invalid match ID: please enter a positive match ID number."),
                ephemeral=True,
            )
            return

        logging.info(f"Deleting match {match_id} (requested by {interaction.user.id})")
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            resp = await self.api.delete_match(match_id)
        except ApiError as e:
            logging.warning(f"Delete match {match_id} failed: {e}")
            await interaction.followup.send(embed=build_api_error_embed(e, "Failed to delete match"), ephemeral=True)
            return
        await interaction.followup.send(embed=build_match_deleted_embed(resp.data or {}), ephemeral=True)
