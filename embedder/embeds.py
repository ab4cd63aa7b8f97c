"""
Conversion of preview cards into Discord embeds.
"""
from typing import Iterable, List

import discord

from .types import PreviewCard


def to_discord_embed(card: PreviewCard) -> discord.Embed:
    embed = discord.Embed(
        title=card.title,
        url=card.source_url,
        description=card.description,
        color=discord.Color(card.color),
    )
    if card.author:
        embed.set_author(name=card.author.name, icon_url=card.author.icon_url)
    if card.thumbnail:
        embed.set_thumbnail(url=card.thumbnail)
    if card.image:
        embed.set_image(url=card.image)
    for field in card.fields:
        embed.add_field(name=field.name, value=field.value, inline=field.inline)
    if card.footer:
        embed.set_footer(text=card.footer)
    return embed


def image_embeds(urls: Iterable[str], color: int) -> List[discord.Embed]:
    """One image-only embed per URL, for follow-up messages."""
    return [discord.Embed(color=discord.Color(color)).set_image(url=url) for url in urls]
