"""Google Sheets ``values:append`` sink over aiohttp."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import quote

import aiohttp

from wake_streak_bot.core.interfaces.log_sink import AbstractCheckInLogSink

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"


class SheetsLogSink(AbstractCheckInLogSink):
    """Appends rows to a spreadsheet range using a pre-issued OAuth access token."""

    def __init__(
        self,
        spreadsheet_id: str,
        access_token: str,
        sheet_range: str = "Sheet1!A:F",
        base_url: str = SHEETS_API_BASE,
        timeout: float = 10.0,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/{spreadsheet_id}/values/{quote(sheet_range, safe='')}:append"
        self._headers = {"Authorization": f"Bearer {access_token}"}
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def append_row(self, row: Sequence[str]) -> None:
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.post(
                self._url,
                params={"valueInputOption": "USER_ENTERED"},
                json={"values": [list(row)]},
                headers=self._headers,
            ) as resp:
                resp.raise_for_status()
