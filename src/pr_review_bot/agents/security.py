"""Security-focused analyzers."""

import re

from pr_review_bot.agents.base import JS_EXTENSIONS, AIAnalyzer, PatternAnalyzer, rule
from pr_review_bot.models.issues import IssueType, Severity

_MOVE_SECRET = "Move the secret to environment variables or a secure vault."


def _secret_rule(pattern: str, name: str):
    return rule(
        pattern,
        f"Hardcoded {name}",
        f"A hardcoded {name.lower()} was found in the source code. "
        "Secrets committed to the repository can be extracted by anyone with read access.",
        Severity.CRITICAL,
        _MOVE_SECRET,
        flags=re.IGNORECASE,
    )


class SecurityAnalyzer(PatternAnalyzer):
    """Detects common vulnerable constructs with per-language patterns."""

    NAME = "security"
    ISSUE_TYPE = IssueType.SECURITY

    RULES = [
        _secret_rule(r"""(?:password|passwd|pwd).*?[=:]\s*['"](?!.*\$\{)([^'"]{8,})['"]""", "Password"),
        _secret_rule(r"""(?:api[_-]?key|apikey|token).*?[=:]\s*['"]([^'"]{8,})['"]""", "API Key"),
        _secret_rule(r"""(?:secret|private[_-]?key).*?[=:]\s*['"]([^'"]{8,})['"]""", "Secret"),
        _secret_rule(
            r"""(?:aws[_-]?access[_-]?key[_-]?id).*?[=:]\s*['"]([A-Z0-9]{20})['"]""",
            "AWS Access Key",
        ),
        _secret_rule(
            r"""(?:aws[_-]?secret[_-]?access[_-]?key).*?[=:]\s*['"]([A-Za-z0-9/+=]{40})['"]""",
            "AWS Secret Key",
        ),
        # JavaScript / TypeScript
        rule(
            r"\beval\s*\(",
            "Use of eval",
            "The eval function is dangerous as it can execute arbitrary code.",
            Severity.ERROR,
            "Avoid using eval. Use safer alternatives.",
            JS_EXTENSIONS | {".php"},
        ),
        rule(
            r"\.innerHTML\s*=",
            "Use of innerHTML",
            "Using innerHTML can lead to XSS vulnerabilities if the content is not properly sanitized.",
            Severity.WARNING,
            "Use textContent or DOM methods instead, or sanitize the HTML content.",
            JS_EXTENSIONS,
        ),
        rule(
            r"document\.write\s*\(",
            "Use of document.write",
            "document.write can introduce XSS vulnerabilities and blocks page rendering.",
            Severity.WARNING,
            "Use DOM manipulation methods instead.",
            JS_EXTENSIONS,
        ),
        # Python
        rule(
            r"\b(?:exec|eval)\s*\(",
            "Use of exec/eval",
            "The exec/eval functions are dangerous as they can execute arbitrary code.",
            Severity.ERROR,
            "Avoid using exec/eval. Use safer alternatives.",
            {".py"},
        ),
        rule(
            r"subprocess\.(?:call|Popen|run|check_call|check_output).*shell\s*=\s*True",
            "Use of shell=True",
            "Using shell=True with subprocess functions can lead to shell injection vulnerabilities.",
            Severity.ERROR,
            "Avoid using shell=True. Pass arguments as a list instead.",
            {".py"},
        ),
        rule(
            r"\bpickle\.loads?\s*\(",
            "Use of pickle",
            "The pickle module is not secure against maliciously constructed data.",
            Severity.WARNING,
            "Use a safer serialization format like JSON.",
            {".py"},
        ),
        # Java
        rule(
            r"Runtime\.getRuntime\(\)\.exec\s*\(",
            "Use of Runtime.exec",
            "Using Runtime.exec can lead to command injection vulnerabilities "
            "if user input is not properly sanitized.",
            Severity.WARNING,
            "Validate and sanitize any user input used in the command.",
            {".java"},
        ),
        rule(
            r"""(?:executeQuery|executeUpdate)\s*\(\s*['"]\s*(?:SELECT|INSERT|UPDATE|DELETE).*\+""",
            "SQL Injection risk",
            "Concatenating strings to build SQL queries can lead to SQL injection vulnerabilities.",
            Severity.ERROR,
            "Use prepared statements or parameterized queries.",
            {".java"},
            flags=re.IGNORECASE,
        ),
        # PHP
        rule(
            r"\b(?:shell_exec|exec|system|passthru)\s*\(|`[^`]*`",
            "Use of shell commands",
            "Using shell commands can lead to command injection vulnerabilities "
            "if user input is not properly sanitized.",
            Severity.ERROR,
            "Validate and sanitize any user input used in the command.",
            {".php"},
        ),
        rule(
            r"""mysql_query\s*\(\s*['"]\s*(?:SELECT|INSERT|UPDATE|DELETE).*\$""",
            "SQL Injection risk",
            "Concatenating variables to build SQL queries can lead to SQL injection vulnerabilities.",
            Severity.ERROR,
            "Use prepared statements or parameterized queries.",
            {".php"},
            flags=re.IGNORECASE,
        ),
    ]


class SecurityAIAnalyzer(AIAnalyzer):
    """Asks the model for vulnerabilities the patterns cannot see."""

    NAME = "security-ai"
    ISSUE_TYPE = IssueType.SECURITY
    DEFAULT_SEVERITY = Severity.ERROR

    ROLE = "You are a security expert."
    FOCUS = [
        "Injection vulnerabilities (SQL, NoSQL, OS command, LDAP, etc.)",
        "Cross-site scripting (XSS)",
        "Cross-site request forgery (CSRF)",
        "Insecure deserialization",
        "Sensitive data exposure",
        "Broken authentication",
        "Security misconfiguration",
        "Using components with known vulnerabilities",
        "Insufficient logging and monitoring",
        "Hardcoded credentials or secrets",
    ]
