"""Environment-driven settings for WakeStreakBot."""

from __future__ import annotations

import os
from pathlib import Path

BOT_TOKEN = os.getenv("BOT_TOKEN")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Local durable state
USER_DATA_FILE = Path(os.getenv("WSB_USER_DATA_FILE", "userData.json")).expanduser().absolute()

# External check-in log: Google Sheets takes precedence over the SQL table
SHEETS_SPREADSHEET_ID = os.getenv("WSB_SHEETS_SPREADSHEET_ID")
SHEETS_ACCESS_TOKEN = os.getenv("WSB_SHEETS_ACCESS_TOKEN")
SHEETS_RANGE = os.getenv("WSB_SHEETS_RANGE", "Sheet1!A:F")
CHECKIN_LOG_DB_URL = os.getenv("WSB_CHECKIN_LOG_DB_URL")

LOG_MAX_ATTEMPTS = int(os.getenv("WSB_LOG_MAX_ATTEMPTS", "5"))
LOG_BACKOFF_BASE_MS = int(os.getenv("WSB_LOG_BACKOFF_BASE_MS", "500"))

# Webhook deployment
BASE_URL = os.getenv("BASE_URL")  # e.g. https://my-bot.onrender.com
WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET", "wsbsecret")
PORT = int(os.getenv("PORT", "8080"))
