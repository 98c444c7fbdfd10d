"""Review finding data model"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional


FINGERPRINT_LENGTH = 16


class Severity(str, Enum):
    """Finding severity levels"""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @classmethod
    def _missing_(cls, value):
        """Handle case-insensitive matching and analyser-specific aliases"""
        if isinstance(value, str):
            value = value.strip().lower()
            if value in ("critical", "high"):
                return cls.ERROR
            if value in ("medium", "low"):
                return cls.WARNING
            if value in ("informational", "note"):
                return cls.INFO
            for member in cls:
                if member.value == value:
                    return member
        return None


SEVERITY_ORDER = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}


def canonicalize_file_path(value: object) -> str:
    """Normalize a finding path to repo-relative forward-slash form."""
    text = str(value or "").strip().replace("\\", "/")
    while text.startswith("./"):
        text = text[2:]
    return text.lstrip("/")


def generate_fingerprint(file: str, message: str, rule_id: Optional[str] = None) -> str:
    """Build a line-independent fingerprint for a finding.

    The line number is deliberately excluded so the same logical issue keeps
    its fingerprint when surrounding code moves.
    """
    components = [canonicalize_file_path(file), rule_id or "", " ".join(message.split())]
    digest = hashlib.sha256(":".join(components).encode("utf-8")).hexdigest()
    return digest[:FINGERPRINT_LENGTH]


@dataclass(frozen=True)
class Finding:
    """A single finding reported by an analysis agent"""

    fingerprint: str
    file: str
    line: int
    severity: Severity
    message: str
    source_agent: str
    rule_id: Optional[str] = None
    suggestion: Optional[str] = None
    end_line: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary"""
        return {
            "fingerprint": self.fingerprint,
            "file": self.file,
            "line": self.line,
            "end_line": self.end_line,
            "severity": self.severity.value,
            "message": self.message,
            "rule_id": self.rule_id,
            "source_agent": self.source_agent,
            "suggestion": self.suggestion,
        }
