# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Kekirawa Central College website: session authentication and admin gate."""

__version__ = "0.1.0"
