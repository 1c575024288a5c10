"""Unit tests for message formatting and chunking."""

import pytest

from h1_watcher.models.program import Program
from h1_watcher.services.message_formatter import (
    DISCORD_HEADER_LABEL,
    SEPARATOR,
    TELEGRAM_HEADER_LABEL,
    build_header,
    chunk_messages,
    escape_html,
    format_discord_entry,
    format_discord_message,
    format_telegram_entry,
    format_telegram_message,
)


def make_programs(count, name_length=20):
    return [
        Program(
            id=str(i),
            handle=f"handle-{i}",
            name=f"{'N' * name_length}{i}",
            offers_bounties=i % 2 == 0,
        )
        for i in range(count)
    ]


def split_message(message):
    header, _, body = message.partition(SEPARATOR)
    return header, body.split(SEPARATOR)


class TestEntries:
    def test_telegram_entry(self):
        program = Program(id="1", handle="acme", name="Acme", offers_bounties=True)

        assert format_telegram_entry(program) == (
            "• <b>Acme</b> (<code>acme</code>) - 💰 Bounty\n"
            "  → https://hackerone.com/acme"
        )

    def test_telegram_entry_escapes_html(self):
        program = Program(id="1", handle="a&b", name="<script>")

        entry = format_telegram_entry(program)

        assert "<script>" not in entry
        assert "&lt;script&gt;" in entry
        assert "a&amp;b" in entry

    def test_discord_entry(self):
        program = Program(id="1", handle="acme", name="Acme", offers_bounties=False)

        assert format_discord_entry(program) == (
            "• **Acme** (`acme`) - 🏅 VDP\n"
            "  → <https://hackerone.com/acme>"
        )

    def test_escape_html(self):
        assert escape_html("a < b & c > d") == "a &lt; b &amp; c &gt; d"


class TestHeaders:
    def test_single_program_header(self):
        assert build_header("X", 1) == "🔔 X: 1 new HackerOne program detected!"

    def test_plural_header(self):
        assert build_header("X", 3) == "🔔 X: 3 new HackerOne programs detected!"

    def test_part_header(self):
        assert build_header("X", 30, part=2) == "🔔 X: 30 new programs (part 2):"


class TestChunkMessages:
    def test_empty_input(self):
        assert chunk_messages([], format_telegram_entry, TELEGRAM_HEADER_LABEL, 4096) == []

    def test_fits_in_single_message(self):
        programs = make_programs(3)

        chunks = chunk_messages(programs, format_telegram_entry, TELEGRAM_HEADER_LABEL, 4096)

        assert chunks == [format_telegram_message(programs)]

    def test_single_message_header_and_separator(self):
        programs = make_programs(2)

        header, entries = split_message(
            chunk_messages(programs, format_discord_entry, DISCORD_HEADER_LABEL, 2000)[0]
        )

        assert header == "🔔 **h1-watcher**: 2 new HackerOne programs detected!"
        assert entries == [format_discord_entry(p) for p in programs]

    @pytest.mark.parametrize("max_length", [300, 500, 1000, 2000])
    def test_chunks_respect_limit(self, max_length):
        programs = make_programs(40)

        chunks = chunk_messages(programs, format_discord_entry, DISCORD_HEADER_LABEL, max_length)

        assert len(chunks) > 1
        assert all(len(chunk) <= max_length for chunk in chunks)

    def test_chunks_preserve_every_entry_in_order(self):
        programs = make_programs(40)

        chunks = chunk_messages(programs, format_telegram_entry, TELEGRAM_HEADER_LABEL, 600)

        rendered = []
        for chunk in chunks:
            rendered.extend(split_message(chunk)[1])
        assert rendered == [format_telegram_entry(p) for p in programs]

    def test_part_headers_are_numbered(self):
        programs = make_programs(40)

        chunks = chunk_messages(programs, format_discord_entry, DISCORD_HEADER_LABEL, 500)

        for index, chunk in enumerate(chunks, start=1):
            header, _ = split_message(chunk)
            assert header == build_header(DISCORD_HEADER_LABEL, 40, part=index)

    def test_chunk_is_closed_only_when_next_entry_overflows(self):
        programs = make_programs(40)
        max_length = 500

        chunks = chunk_messages(programs, format_discord_entry, DISCORD_HEADER_LABEL, max_length)

        entries = [format_discord_entry(p) for p in programs]
        consumed = 0
        for chunk in chunks[:-1]:
            count = len(split_message(chunk)[1])
            consumed += count
            next_entry = entries[consumed]
            assert len(chunk) + len(SEPARATOR) + len(next_entry) > max_length

    def test_oversized_entry_is_not_split(self):
        programs = [Program(id="1", handle="big", name="x" * 300)] + make_programs(2)

        chunks = chunk_messages(programs, format_discord_entry, DISCORD_HEADER_LABEL, 150)

        assert len(chunks) == 3
        assert len(chunks[0]) > 150
        assert format_discord_entry(programs[0]) in chunks[0]

    def test_fifty_programs_fit_discord_limit(self):
        programs = make_programs(50)

        chunks = chunk_messages(programs, format_discord_entry, DISCORD_HEADER_LABEL, 2000)

        assert len(chunks) >= 2
        assert all(len(chunk) <= 2000 for chunk in chunks)
        assert sum(len(split_message(c)[1]) for c in chunks) == 50


def test_full_messages_contain_every_program():
    programs = make_programs(5)

    telegram = format_telegram_message(programs)
    discord = format_discord_message(programs)

    for program in programs:
        assert f"<code>{program.handle}</code>" in telegram
        assert f"`{program.handle}`" in discord
