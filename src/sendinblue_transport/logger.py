# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging helpers for the Sendinblue transport."""

import logging


def get_logger(name: str = "sendinblue_transport") -> logging.Logger:
    """Return a named :class:`logging.Logger` instance.

    Note: Handlers are configured by the entry point (the CLI calls
    logging.basicConfig()); library code never adds its own.
    """
    return logging.getLogger(name)
