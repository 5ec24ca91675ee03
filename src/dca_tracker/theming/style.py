"""Centralized palette and number formats for DCA Tracker terminal output (rich styles)."""

from __future__ import annotations

from rich import box

COLOR_GAIN = "green"
COLOR_LOSS = "red"
COLOR_MUTED = "grey62"
COLOR_ACCENT = "steel_blue1"
COLOR_WARNING = "yellow"
HEAD = "bold white"

TABLE_BOX = box.SIMPLE
HEADER_STYLE = f"bold {COLOR_ACCENT}"
ROW_STYLES = ["", "on grey7"]

AMOUNT_DECIMALS = 2
PRICE_DECIMALS = 4
NOT_APPLICABLE = "—"
