"""Error message sanitization for console output and archives."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional, Union


def sanitize_error(message: str, root: Optional[Union[str, Path]] = None) -> str:
    """Redact credentials and absolute paths from an error message.

    Paths under ``root`` (the agent definitions directory) are shown
    relative to it; the user's home directory is replaced with a token.
    """
    if not message:
        return message

    sanitized = message
    sanitized = re.sub(r"gh[pousr]_[A-Za-z0-9]{20,}", "[REDACTED_TOKEN]", sanitized)
    sanitized = re.sub(r"github_pat_[A-Za-z0-9_]{20,}", "[REDACTED_TOKEN]", sanitized)
    sanitized = re.sub(r"Bearer\s+\S+", "Bearer [REDACTED]", sanitized)
    sanitized = re.sub(r"(?i)(password|passwd|secret)=\S+", r"\1=[REDACTED]", sanitized)

    if root:
        root_str = str(root).rstrip("/\\")
        if root_str:
            sanitized = sanitized.replace(root_str + os.sep, "")
            sanitized = sanitized.replace(root_str, ".")

    home = os.environ.get("USERPROFILE") or os.environ.get("HOME") or ""
    if home and home not in ("/", "\\"):
        sanitized = sanitized.replace(home, "[USER_HOME]")

    return sanitized
