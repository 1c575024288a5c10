"""Message formatting and chunking for notification channels.

Renders new programs into Telegram (HTML) or Discord (Markdown) text and
splits the result into messages that respect a channel's hard length limit.

Usage:
    from h1_watcher.services.message_formatter import (
        chunk_messages,
        format_telegram_entry,
        TELEGRAM_HEADER_LABEL,
    )

    chunks = chunk_messages(programs, format_telegram_entry, TELEGRAM_HEADER_LABEL, 4096)
"""

from typing import Callable, List, Optional, Sequence

from h1_watcher.models.program import Program

SEPARATOR = "\n\n"
TELEGRAM_HEADER_LABEL = "<b>h1-watcher</b>"
DISCORD_HEADER_LABEL = "**h1-watcher**"

EntryFormatter = Callable[[Program], str]


def escape_html(text: object) -> str:
    """Escape the characters Telegram's HTML parse mode treats as markup."""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _program_kind(program: Program) -> str:
    return "💰 Bounty" if program.offers_bounties else "🏅 VDP"


def format_telegram_entry(program: Program) -> str:
    """Render one program for Telegram HTML mode."""
    name = escape_html(program.name)
    handle = escape_html(program.handle)
    return (
        f"• <b>{name}</b> (<code>{handle}</code>) - {_program_kind(program)}\n"
        f"  → https://hackerone.com/{handle}"
    )


def format_discord_entry(program: Program) -> str:
    """Render one program for Discord Markdown."""
    return (
        f"• **{program.name}** (`{program.handle}`) - {_program_kind(program)}\n"
        f"  → <{program.url}>"
    )


def build_header(label: str, total: int, part: Optional[int] = None) -> str:
    """Header line for a single message, or for part ``part`` of a split batch."""
    if part is not None:
        return f"🔔 {label}: {total} new programs (part {part}):"
    plural = "s" if total != 1 else ""
    return f"🔔 {label}: {total} new HackerOne program{plural} detected!"


def format_telegram_message(programs: Sequence[Program]) -> str:
    """Full, un-chunked Telegram message."""
    entries = [format_telegram_entry(p) for p in programs]
    return build_header(TELEGRAM_HEADER_LABEL, len(programs)) + SEPARATOR + SEPARATOR.join(entries)


def format_discord_message(programs: Sequence[Program]) -> str:
    """Full, un-chunked Discord message."""
    entries = [format_discord_entry(p) for p in programs]
    return build_header(DISCORD_HEADER_LABEL, len(programs)) + SEPARATOR + SEPARATOR.join(entries)


def chunk_messages(
    programs: Sequence[Program],
    entry_formatter: EntryFormatter,
    header_label: str,
    max_length: int,
) -> List[str]:
    """Split programs into messages no longer than ``max_length``.

    Tries a single message first. Otherwise packs rendered entries greedily
    in order: a chunk is closed as soon as the next entry would push it,
    part header included, past the limit. Entries are never reordered or
    split, so one entry longer than ``max_length`` yields an oversized chunk.

    Args:
        programs: New programs, in notification order.
        entry_formatter: Renders one program.
        header_label: Channel-specific bold label for the header.
        max_length: Hard per-message character limit.

    Returns:
        Message strings in send order; empty when ``programs`` is empty.
    """
    if not programs:
        return []

    total = len(programs)
    entries = [entry_formatter(p) for p in programs]

    single = build_header(header_label, total) + SEPARATOR + SEPARATOR.join(entries)
    if len(single) <= max_length:
        return [single]

    chunks: List[str] = []
    current: List[str] = []
    current_length = 0

    for entry in entries:
        header = build_header(header_label, total, part=len(chunks) + 1)
        separator_length = len(SEPARATOR) if current else 0
        projected = (
            len(header) + len(SEPARATOR) + current_length + separator_length + len(entry)
        )

        if projected > max_length and current:
            chunks.append(header + SEPARATOR + SEPARATOR.join(current))
            current = []
            current_length = 0

        current_length += (len(SEPARATOR) if current else 0) + len(entry)
        current.append(entry)

    if current:
        header = build_header(header_label, total, part=len(chunks) + 1)
        chunks.append(header + SEPARATOR + SEPARATOR.join(current))

    return chunks

