#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Display formatting for widget readouts.
"""

import math

import pandas as pd


def _round_half_up(value):
    """Halves round up, like the widget engine (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(float(value) + 0.5))


def format_number(value):
    """Whole number with thousands separators ("12,345")."""
    if pd.isna(value):
        return "0"
    return f"{_round_half_up(value):,}"


def format_large_number(num, suffix=''):
    """Formats a large number into a human-readable format (K, M)."""
    if pd.isna(num):
        return f"0{suffix}"
    num = float(num)

    if abs(num) < 1000:
        return f"{num:,.0f}{suffix}"
    elif abs(num) < 1_000_000:
        return f"{num/1000:,.1f}K{suffix}"
    else:
        return f"{num/1_000_000:,.1f}M{suffix}"


def format_percentage(value):
    """Rounded percentage ("42%"); not clamped."""
    if pd.isna(value):
        return "0%"
    return f"{_round_half_up(value)}%"


def format_change(change):
    """
    Signed change label for week-over-week / average comparisons.

    Args:
        change: Whole-percent change (0 means no meaningful comparison)

    Returns:
        str: "+12%", "-3%" or "0%"
    """
    if pd.isna(change) or change == 0:
        return "0%"
    sign = "+" if change > 0 else ""
    return f"{sign}{_round_half_up(change)}%"
