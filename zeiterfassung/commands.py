import io

import discord
from discord import app_commands

from . import aggregator
from .csv_codec import encode_sessions, export_filename
from .dispatcher import AddSession, DeleteSession, EditNotes, ImportCsv, SelectMonth, SetUserName, ShiftMonth
from .reporter import fit_message, report_filename
from .timeconv import local_today

MAX_IMPORT_BYTES = 5 * 1024 * 1024


def register_commands(bot):
    """Register all slash commands on the bot. Called once during setup."""
    guild_scope = discord.Object(id=bot.config.guild_id)

    async def reject_foreign_user(interaction) -> bool:
        if interaction.user.id == bot.config.owner_user_id:
            return False
        await interaction.response.send_message("This ledger belongs to someone else.", ephemeral=True)
        return True

    async def reply_status(interaction, status, body: str | None = None):
        prefix = "" if status.ok else "Error: "
        content = f"{prefix}{status.text}"
        if body:
            content = f"{content}\n{body}"
        await interaction.response.send_message(content, ephemeral=True)

    @bot.tree.command(name="status", description="Show ledger status", guild=guild_scope)
    async def status(interaction):
        if await reject_foreign_user(interaction):
            return

        state = bot.state
        lines = [
            "Zeiterfassung ledger: online",
            f"Owner: `{state.user_name or 'unnamed'}`",
            f"Timezone: `{bot.config.timezone_name}`",
            f"Sessions stored: `{len(state.sessions)}`",
            f"Selected month: `{aggregator.month_label(state.year, state.month)}`",
        ]
        await interaction.response.send_message("\n".join(lines), ephemeral=True)

    @bot.tree.command(name="totals", description="Show today's, this week's and this month's totals", guild=guild_scope)
    async def totals(interaction):
        if await reject_foreign_user(interaction):
            return

        content = bot.reporter.build_totals_content(bot.state.sessions, local_today(bot.config.timezone))
        await interaction.response.send_message(content, ephemeral=True)

    @bot.tree.command(name="timesheet", description="Show the monthly timesheet", guild=guild_scope)
    @app_commands.describe(year="Year to show (defaults to the selected month)", month="Month 1-12")
    async def timesheet(interaction, year: int | None = None, month: int | None = None):
        if await reject_foreign_user(interaction):
            return

        if year is not None or month is not None:
            status = bot.handle(SelectMonth(year or bot.state.year, month or bot.state.month))
            if not status.ok:
                await reply_status(interaction, status)
                return

        state = bot.state
        sheet = bot.reporter.build_timesheet(state.sessions, state.year, state.month, local_today(bot.config.timezone))
        await interaction.response.send_message(bot.reporter.build_timesheet_content(sheet), ephemeral=True)

    @bot.tree.command(name="months", description="List months with recorded sessions", guild=guild_scope)
    async def months(interaction):
        if await reject_foreign_user(interaction):
            return

        options = aggregator.available_months(bot.state.sessions, tz=bot.config.timezone)
        lines = ["Available months:"]
        for option in options:
            marker = " (selected)" if (option.year, option.month) == (bot.state.year, bot.state.month) else ""
            lines.append(f"- {option.label} (`{option.year} {option.month}`){marker}")
        await interaction.response.send_message(fit_message(lines), ephemeral=True)

    @bot.tree.command(name="prev-month", description="Select the previous month", guild=guild_scope)
    async def prev_month(interaction):
        if await reject_foreign_user(interaction):
            return
        await reply_status(interaction, bot.handle(ShiftMonth(-1)))

    @bot.tree.command(name="next-month", description="Select the next month", guild=guild_scope)
    async def next_month(interaction):
        if await reject_foreign_user(interaction):
            return
        await reply_status(interaction, bot.handle(ShiftMonth(1)))

    @bot.tree.command(name="add", description="Add a session manually", guild=guild_scope)
    @app_commands.describe(date="Local date YYYY-MM-DD", start="Local start HH:MM", end="Local end HH:MM", notes="Optional notes")
    async def add(interaction, date: str, start: str, end: str, notes: str | None = None):
        if await reject_foreign_user(interaction):
            return
        await reply_status(interaction, bot.handle(AddSession(date, start, end, notes or "")))

    @bot.tree.command(name="notes", description="Replace the notes of a session", guild=guild_scope)
    @app_commands.describe(session_id="Session ID as shown in /timesheet", text="New notes (empty clears them)")
    async def notes(interaction, session_id: str, text: str = ""):
        if await reject_foreign_user(interaction):
            return
        await reply_status(interaction, bot.handle(EditNotes(session_id, text)))

    @bot.tree.command(name="delete", description="Delete a session", guild=guild_scope)
    @app_commands.describe(session_id="Session ID as shown in /timesheet")
    async def delete(interaction, session_id: str):
        if await reject_foreign_user(interaction):
            return
        await reply_status(interaction, bot.handle(DeleteSession(session_id)))

    @bot.tree.command(name="name", description="Set the name printed on reports", guild=guild_scope)
    async def name(interaction, value: str):
        if await reject_foreign_user(interaction):
            return
        await reply_status(interaction, bot.handle(SetUserName(value)))

    @bot.tree.command(name="export", description="Export all sessions as CSV", guild=guild_scope)
    async def export(interaction):
        if await reject_foreign_user(interaction):
            return

        payload = encode_sessions(bot.ledger.list()).encode("utf-8")
        filename = export_filename(local_today(bot.config.timezone))
        await interaction.response.send_message(
            "Data exported.",
            file=discord.File(io.BytesIO(payload), filename=filename),
            ephemeral=True,
        )

    @bot.tree.command(name="import", description="Import sessions from a CSV export", guild=guild_scope)
    async def import_(interaction, file: discord.Attachment):
        if await reject_foreign_user(interaction):
            return

        if file.size > MAX_IMPORT_BYTES:
            await interaction.response.send_message("Error: CSV file is too large.", ephemeral=True)
            return

        try:
            raw = await file.read()
            content = raw.decode("utf-8")
        except (discord.HTTPException, UnicodeDecodeError) as exc:
            bot.logger.warning("Failed to read CSV attachment: %s", exc)
            await interaction.response.send_message("Error: failed to read the CSV file.", ephemeral=True)
            return

        await reply_status(interaction, bot.handle(ImportCsv(content)))

    @bot.tree.command(name="report", description="Download a printable timesheet for the selected month", guild=guild_scope)
    async def report(interaction):
        if await reject_foreign_user(interaction):
            return

        state = bot.state
        today = local_today(bot.config.timezone)
        sheet = bot.reporter.build_timesheet(state.sessions, state.year, state.month, today)
        document = bot.reporter.build_print_document(sheet, state.user_name, today)
        await interaction.response.send_message(
            f"Printable timesheet for {sheet.label}. Open it in a browser to print or save as PDF.",
            file=discord.File(io.BytesIO(document.encode("utf-8")), filename=report_filename(state.year, state.month)),
            ephemeral=True,
        )
