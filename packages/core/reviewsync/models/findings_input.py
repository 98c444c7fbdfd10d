"""Pydantic models for parsing and validating agent findings JSON."""

import hashlib
import json
import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from reviewsync.errors import FindingsInputError
from reviewsync.models.comments import ExistingComment
from reviewsync.models.finding import (
    FINGERPRINT_LENGTH,
    Finding,
    Severity,
    canonicalize_file_path,
    generate_fingerprint,
)

logger = logging.getLogger(__name__)

_FINGERPRINT_RE = re.compile(rf"^[a-f0-9]{{{FINGERPRINT_LENGTH}}}$")


class FindingInput(BaseModel):
    file: str = Field(..., description="Repo-relative path of the affected file")
    line: Optional[int] = Field(None, description="1-indexed line the finding anchors to")
    end_line: Optional[int] = Field(None, description="Last line for multi-line findings")
    severity: Severity = Field(Severity.WARNING, description="Finding severity")
    message: str = Field(..., description="Human-readable message")
    source_agent: str = Field("unknown", description="Agent that produced the finding")
    rule_id: Optional[str] = Field(None, description="Rule or check identifier")
    suggestion: Optional[str] = Field(None, description="Suggested fix")
    fingerprint: Optional[str] = Field(None, description="Line-independent identity hash")

    @model_validator(mode='before')
    @classmethod
    def normalize_input(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            # camelCase and tool-specific aliases
            aliases = {
                'path': 'file',
                'file_path': 'file',
                'line_number': 'line',
                'start_line': 'line',
                'endLine': 'end_line',
                'sourceAgent': 'source_agent',
                'agent': 'source_agent',
                'tool': 'source_agent',
                'ruleId': 'rule_id',
                'check_id': 'rule_id',
            }
            for alias, canonical in aliases.items():
                if alias in data and canonical not in data:
                    data[canonical] = data[alias]
        return data

    @field_validator('file')
    @classmethod
    def canonical_path(cls, v: str) -> str:
        path = canonicalize_file_path(v)
        if not path:
            raise ValueError("file must not be empty")
        return path

    @field_validator('severity', mode='before')
    @classmethod
    def coerce_severity(cls, v):
        if isinstance(v, str):
            return Severity(v)
        return v

    @field_validator('line', 'end_line', mode='before')
    @classmethod
    def coerce_line(cls, v):
        if isinstance(v, list):
            return v[0] if v else None
        return v

    def to_finding(self) -> Optional[Finding]:
        """Convert to a Finding, or None when the input has no usable line."""
        if self.line is None or self.line <= 0:
            return None

        end_line = self.end_line if self.end_line and self.end_line > self.line else None
        return Finding(
            fingerprint=_normalize_fingerprint(self.fingerprint)
            or generate_fingerprint(self.file, self.message, self.rule_id),
            file=self.file,
            line=self.line,
            end_line=end_line,
            severity=self.severity,
            message=self.message,
            source_agent=self.source_agent,
            rule_id=self.rule_id,
            suggestion=self.suggestion,
        )


class FindingsDocument(BaseModel):
    findings: List[FindingInput] = Field(default_factory=list)

    @classmethod
    def validate_input(cls, data: Any) -> 'FindingsDocument':
        if isinstance(data, list):
            return cls(findings=data)
        elif isinstance(data, dict):
            if 'findings' in data:
                return cls(findings=data['findings'])
            elif 'issues' in data:
                return cls(findings=data['issues'])
            return cls(**data)
        raise ValueError("Invalid input format for findings document")


class ExistingCommentInput(BaseModel):
    id: int = Field(..., description="Comment or thread id")
    body: str = Field("", description="Comment body")
    file: Optional[str] = None
    line: Optional[int] = None
    resolved: bool = False

    @model_validator(mode='before')
    @classmethod
    def normalize_input(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if 'id' not in data:
                data['id'] = data.get('comment_id', data.get('thread_id'))
            if 'body' not in data and 'content' in data:
                data['body'] = data['content']
            if 'file' not in data and 'path' in data:
                data['file'] = data['path']
        return data

    def to_existing_comment(self) -> ExistingComment:
        return ExistingComment(
            comment_id=self.id,
            body=self.body,
            file=canonicalize_file_path(self.file) if self.file else None,
            line=self.line,
            resolved=self.resolved,
        )


def _normalize_fingerprint(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    text = value.strip().lower()
    if _FINGERPRINT_RE.match(text):
        return text
    # Foreign fingerprint formats are folded into the key format so identity
    # stays stable across runs.
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def parse_findings(data: Union[list, dict]) -> List[Finding]:
    """Parse decoded findings JSON into Finding objects.

    Findings without a positive line cannot become inline comments and are
    dropped.
    """
    document = FindingsDocument.validate_input(data)
    findings: List[Finding] = []
    dropped = 0
    for item in document.findings:
        finding = item.to_finding()
        if finding is None:
            dropped += 1
            continue
        findings.append(finding)
    if dropped:
        logger.debug("Dropped %d findings without a usable line number", dropped)
    return findings


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise FindingsInputError(path, f"unable to read file: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise FindingsInputError(
            path,
            f"invalid JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}",
        ) from exc


def load_findings(path: Path) -> List[Finding]:
    """Load and validate a findings JSON file."""
    data = _read_json(path)
    try:
        return parse_findings(data)
    except (ValidationError, ValueError) as exc:
        raise FindingsInputError(path, f"invalid findings: {exc}") from exc


def load_existing_comments(path: Path) -> List[ExistingComment]:
    """Load a JSON dump of existing platform comments (used for offline plans)."""
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get('comments', data.get('value', []))
    if not isinstance(data, list):
        raise FindingsInputError(path, f"expected a JSON array, got {type(data).__name__}")
    try:
        return [ExistingCommentInput(**item).to_existing_comment() for item in data]
    except (ValidationError, TypeError) as exc:
        raise FindingsInputError(path, f"invalid comments: {exc}") from exc
