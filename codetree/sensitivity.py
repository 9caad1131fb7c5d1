"""Detection of files whose contents must be withheld from reports.

Filename rules are unconditional and evaluated first. Content rules are
structural pattern matches over a bounded sample and err on the side of
redacting.
"""

from __future__ import annotations

import re
from fnmatch import fnmatchcase
from pathlib import PurePosixPath
from typing import Optional, Pattern, Tuple

from .models import RedactionReason, RedactionRecord

CONTENT_SAMPLE_BYTES = 64 * 1024

_EXPLICIT_DENYLIST: Tuple[str, ...] = (
    "secrets.json",
    "secrets.yml",
    "secrets.yaml",
    "aws-config.json",
    "firebase-config.json",
    "database.yml",
    "wp-config.php",
    "application.properties",
    ".npmrc",
    ".pypirc",
    ".netrc",
    ".htpasswd",
    ".pgpass",
    "terraform.tfvars",
    "terraform.tfstate",
)

_CREDENTIAL_NAME_PATTERNS: Tuple[str, ...] = (
    "credentials",
    "credentials.*",
    "*-credentials.*",
    "*_credentials.*",
    "service-account*.json",
    "*.tfvars",
)

_KEY_NAME_PATTERNS: Tuple[str, ...] = (
    "*.pem",
    "*.key",
    "*.p12",
    "*.pfx",
    "*.p8",
    "*.jks",
    "*.keystore",
    "*.asc",
    "id_rsa",
    "id_dsa",
    "id_ecdsa",
    "id_ed25519",
)

_CREDENTIAL_DIRS: Tuple[str, ...] = (".ssh", ".aws", ".gnupg", "secrets", "credentials")

# Files where KEY=value lines are configuration rather than source code.
_ENV_LIKE_SUFFIXES: Tuple[str, ...] = (".env", ".ini", ".cfg", ".conf", ".properties", ".sh")

_ASSIGNMENT_RE: Pattern[str] = re.compile(
    r"^\s*(?:export\s+)?[A-Za-z0-9_.]*"
    r"(?:KEY|SECRET|TOKEN|PASSWORD|PASSWD|PWD|CREDENTIAL|AUTH)[A-Za-z0-9_.]*"
    r"\s*[=:]\s*\S+",
    re.IGNORECASE | re.MULTILINE,
)
_PRIVATE_KEY_RE: Pattern[str] = re.compile(r"-----BEGIN (?:[A-Z0-9]+ )*PRIVATE KEY-----")
_TOKEN_RES: Tuple[Pattern[str], ...] = (
    re.compile(r"\bAKIA[0-9A-Z]{16}\b"),
    re.compile(r"\bsk-[A-Za-z0-9_-]{20,}"),
    re.compile(r"\bgh[pousr]_[A-Za-z0-9]{30,}"),
    re.compile(r"\bxox[abposr]-[A-Za-z0-9-]{10,}"),
    re.compile(r"\bAIza[0-9A-Za-z_-]{35}"),
)
_CONNECTION_STRING_RE: Pattern[str] = re.compile(
    r"\b(?:postgres(?:ql)?|mysql|mariadb|mongodb(?:\+srv)?|redis|rediss|amqps?|mssql|sqlserver|oracle)"
    r"://[^\s:/@]+:[^\s@/]+@",
    re.IGNORECASE,
)


def _is_env_name(name: str) -> bool:
    return name == ".env" or name.startswith(".env.") or name.endswith(".env")


def _is_env_like(name: str) -> bool:
    return _is_env_name(name) or "." not in name.lstrip(".") or name.endswith(_ENV_LIKE_SUFFIXES)


class SensitivityDetector:
    """Returns a redaction record for paths or samples that look secret."""

    def check_name(self, rel_path: str) -> Optional[RedactionRecord]:
        posix = PurePosixPath(rel_path)
        name = posix.name
        lowered = name.lower()

        if _is_env_name(lowered):
            return RedactionRecord(rel_path, RedactionReason.ENV_FILE)
        if lowered in _EXPLICIT_DENYLIST:
            return RedactionRecord(rel_path, RedactionReason.EXPLICIT_DENYLIST)
        if any(fnmatchcase(lowered, pattern) for pattern in _KEY_NAME_PATTERNS):
            return RedactionRecord(rel_path, RedactionReason.KEY_PATTERN)
        if any(fnmatchcase(lowered, pattern) for pattern in _CREDENTIAL_NAME_PATTERNS):
            return RedactionRecord(rel_path, RedactionReason.CREDENTIAL_PATTERN)
        if any(part.lower() in _CREDENTIAL_DIRS for part in posix.parts[:-1]):
            return RedactionRecord(rel_path, RedactionReason.CREDENTIAL_PATTERN)
        return None

    def check_content(self, rel_path: str, sample: str) -> Optional[RedactionRecord]:
        if _PRIVATE_KEY_RE.search(sample):
            return RedactionRecord(rel_path, RedactionReason.KEY_PATTERN)
        if any(pattern.search(sample) for pattern in _TOKEN_RES):
            return RedactionRecord(rel_path, RedactionReason.KEY_PATTERN)
        if _CONNECTION_STRING_RE.search(sample):
            return RedactionRecord(rel_path, RedactionReason.CONNECTION_STRING)
        name = PurePosixPath(rel_path).name.lower()
        if _is_env_like(name) and _ASSIGNMENT_RE.search(sample):
            return RedactionRecord(rel_path, RedactionReason.CREDENTIAL_PATTERN)
        return None

    def is_sensitive(self, rel_path: str, sample: str | None = None) -> Optional[RedactionRecord]:
        """Return why ``rel_path`` must be redacted, or None when it is safe."""
        record = self.check_name(rel_path)
        if record is not None or sample is None:
            return record
        return self.check_content(rel_path, sample[:CONTENT_SAMPLE_BYTES])


__all__ = ["CONTENT_SAMPLE_BYTES", "SensitivityDetector"]
