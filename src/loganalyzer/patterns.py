"""
Attack Patterns Module

Declarative signature table for the per-request threat checks. Each
rule names the entry fields it inspects, its severity and the threat
type it raises. Matching is a case-insensitive search against the raw
field values; URL-encoded payloads are not decoded.
"""

import re
from dataclasses import dataclass
from typing import Tuple, Pattern, Optional

from .threats import Severity, ThreatType


@dataclass(frozen=True)
class ThreatRule:
    """Represents one request signature."""

    name: str
    pattern: Pattern
    fields: Tuple[str, ...]
    severity: Severity
    threat_type: ThreatType
    description: str
    required_status: Optional[int] = None

    def match(self, text: str) -> bool:
        """Check if pattern matches text."""
        return bool(self.pattern.search(text or ""))


SQL_INJECTION = ThreatRule(
    name="SQL Injection",
    pattern=re.compile(
        r"(union|select|insert|update|delete|drop|exec|script|alert|onload|"
        r"information_schema|concat|char\(|0x[0-9a-f]+|sleep\(|benchmark\()",
        re.IGNORECASE,
    ),
    fields=("url",),
    severity=Severity.HIGH,
    threat_type=ThreatType.SQL_INJECTION,
    description="SQL injection attempt detected in URL",
)

XSS = ThreatRule(
    name="Cross-Site Scripting",
    pattern=re.compile(
        r"(<script|javascript:|onload=|onerror=|alert\(|prompt\(|confirm\(|"
        r"eval\(|document\.|window\.|<iframe|<object|<embed)",
        re.IGNORECASE,
    ),
    fields=("url", "user_agent"),
    severity=Severity.MEDIUM,
    threat_type=ThreatType.XSS,
    description="Cross-Site Scripting attempt detected",
)

DIRECTORY_TRAVERSAL = ThreatRule(
    name="Directory Traversal",
    pattern=re.compile(
        r"(\.\./|\.\.\\|/etc/|/proc/|/var/|/usr/|/bin/|/sbin/|/root/|/home/|"
        r"\.htaccess|\.htpasswd|config\.php|phpinfo|web\.config)",
        re.IGNORECASE,
    ),
    fields=("url",),
    severity=Severity.HIGH,
    threat_type=ThreatType.DIRECTORY_TRAVERSAL,
    description="Directory traversal or local file inclusion attempt detected",
)

SUSPICIOUS_USER_AGENT = ThreatRule(
    name="Suspicious User Agent",
    pattern=re.compile(
        r"(bot|crawler|scanner|exploit|hack|injection|nikto|sqlmap|nmap|masscan|"
        r"zmap|dirb|gobuster|wfuzz|burp|owasp)",
        re.IGNORECASE,
    ),
    fields=("user_agent",),
    severity=Severity.MEDIUM,
    threat_type=ThreatType.SUSPICIOUS_BOT,
    description="Suspicious bot/scanner detected",
)

AUTH_FAILURE = ThreatRule(
    name="Sensitive Page Auth Failure",
    pattern=re.compile(
        r"(wp-login|admin|login|auth|signin|password|pwd)",
        re.IGNORECASE,
    ),
    fields=("url",),
    severity=Severity.LOW,
    threat_type=ThreatType.AUTH_FAILURE,
    description="Authentication failure on sensitive page",
    required_status=401,
)
