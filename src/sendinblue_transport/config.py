# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration for the Sendinblue transport.

Settings come from an INI file with environment variables as fallbacks.

Environment variables (all prefixed with SIB_):
    SIB_CONFIG - Path to the INI file (default: sendinblue.ini)
    SIB_API_KEY - Provider API key
    SIB_SENDER_IP - Dedicated IP to send from (optional)
    SIB_API_URL - Email-send endpoint (default: provider v3 endpoint)

Config file section/keys::

    [sendinblue]
    api_key = xkeysib-...
    sender_ip = 203.0.113.7
    api_url = https://api.sendinblue.com/v3/smtp/email
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_API_URL = "https://api.sendinblue.com/v3/smtp/email"
CONFIG_SECTION = "sendinblue"


@dataclass(frozen=True)
class TransportConfig:
    """Settings accepted by :class:`SendinblueTransport`."""

    api_key: str
    """Credential sent in the ``api-key`` header."""

    sender_ip: str | None = None
    """Optional dedicated IP, sent in the ``sender.ip`` header."""

    api_url: str = DEFAULT_API_URL
    """Email-send endpoint."""

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("api_key must be set")
        if not self.api_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid api_url: {self.api_url}")


def load_config(path: str | Path | None = None) -> TransportConfig:
    """Build a :class:`TransportConfig` from an INI file and SIB_* variables.

    Values in the file win over the environment. A missing file is not
    an error, the environment alone may be enough.

    Raises:
        ValueError: If no api key is found in either source.
    """
    config_path = Path(path or os.getenv("SIB_CONFIG", "sendinblue.ini"))
    parser = configparser.ConfigParser()
    parser.read(config_path)

    def get(option: str, env_var: str) -> str | None:
        if parser.has_option(CONFIG_SECTION, option):
            value = parser.get(CONFIG_SECTION, option).strip()
            if value:
                return value
        return os.getenv(env_var) or None

    return TransportConfig(
        api_key=get("api_key", "SIB_API_KEY") or "",
        sender_ip=get("sender_ip", "SIB_SENDER_IP"),
        api_url=get("api_url", "SIB_API_URL") or DEFAULT_API_URL,
    )


__all__ = ["CONFIG_SECTION", "DEFAULT_API_URL", "TransportConfig", "load_config"]
