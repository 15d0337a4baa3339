"""Rule catalog for the rule-based scanner.

Each language profile is an ordered tuple of rules. A rule carries its own
detection closure, built from one of four kinds:
- substring: first line containing a token
- sweep: every line containing a token
- regex: first line matching a regular expression
- any: first line containing any of several tokens
"""

import re
from types import MappingProxyType
from typing import Callable, Iterable, NamedTuple, Optional

from .models import Severity


class Rule(NamedTuple):
    """A named detection procedure with fixed severity and texts."""

    id: str
    severity: Severity
    kind: str
    message: str
    improvement: str
    detect: Callable[[str], list[int]]


def _split_lines(content: str) -> list[str]:
    # Only "\n" separates lines; a trailing "\r" stays part of its line.
    return content.split("\n")


def _first_line(content: str, predicate: Callable[[str], bool]) -> Optional[int]:
    """Return the 1-based number of the first line satisfying predicate."""
    for line_num, line in enumerate(_split_lines(content), start=1):
        if predicate(line):
            return line_num
    return None


def substring_rule(
    rule_id: str,
    severity: Severity,
    token: str,
    message: str,
    improvement: str,
) -> Rule:
    """Match once when the token occurs anywhere in the content."""

    def detect(content: str) -> list[int]:
        if token not in content:
            return []
        # No single line holds the token only if it spans a line break.
        return [_first_line(content, lambda line: token in line) or 1]

    return Rule(rule_id, severity, "substring", message, improvement, detect)


def sweep_rule(
    rule_id: str,
    severity: Severity,
    token: str,
    message: str,
    improvement: str,
) -> Rule:
    """Match every line containing the token, in ascending order."""

    def detect(content: str) -> list[int]:
        return [
            line_num
            for line_num, line in enumerate(_split_lines(content), start=1)
            if token in line
        ]

    return Rule(rule_id, severity, "sweep", message, improvement, detect)


def regex_rule(
    rule_id: str,
    severity: Severity,
    pattern: re.Pattern,
    message: str,
    improvement: str,
) -> Rule:
    """Match the first line the pattern is found on."""

    def detect(content: str) -> list[int]:
        line_num = _first_line(content, lambda line: pattern.search(line) is not None)
        return [line_num] if line_num is not None else []

    return Rule(rule_id, severity, "regex", message, improvement, detect)


def any_token_rule(
    rule_id: str,
    severity: Severity,
    tokens: Iterable[str],
    message: str,
    improvement: str,
) -> Rule:
    """Match once when any of the tokens occurs in the content."""
    tokens = tuple(tokens)

    def contains_any(text: str) -> bool:
        return any(token in text for token in tokens)

    def detect(content: str) -> list[int]:
        if not contains_any(content):
            return []
        return [_first_line(content, contains_any) or 1]

    return Rule(rule_id, severity, "any", message, improvement, detect)


# An optional type annotation may sit between the name and "=".
HARDCODED_PASSWORD = re.compile(
    r"""password(?:\s*:\s*[\w.<>\[\]| ]+)?\s*=\s*['"][^'"]*['"]""", re.IGNORECASE
)


JAVASCRIPT_RULES: tuple[Rule, ...] = (
    substring_rule(
        "no-eval",
        Severity.high,
        "eval(",
        "Use of eval() can be dangerous and lead to code injection vulnerabilities",
        "Replace eval() with safer alternatives such as Function constructor or JSON.parse() "
        "for JSON data. Consider restructuring your code to avoid dynamic code execution.",
    ),
    substring_rule(
        "no-dangerous-html",
        Severity.high,
        "dangerouslySetInnerHTML",
        "dangerouslySetInnerHTML can lead to XSS vulnerabilities",
        "Use safer alternatives like React components and props. If you must use HTML, "
        "ensure all user input is properly sanitized using a library like DOMPurify.",
    ),
    substring_rule(
        "no-inner-html",
        Severity.medium,
        "innerHTML",
        "Use of innerHTML can lead to XSS vulnerabilities",
        "Use safer DOM manipulation methods like textContent or createElement() and "
        "appendChild(). For frameworks like React, use their built-in components and props system.",
    ),
    regex_rule(
        "no-hardcoded-secrets",
        Severity.medium,
        HARDCODED_PASSWORD,
        "Hardcoded password detected",
        "Use environment variables or a secure vault service to store sensitive information. "
        "Never hardcode secrets in your source code.",
    ),
    sweep_rule(
        "no-console",
        Severity.low,
        "console.log",
        "Console statements should be removed in production code",
        "Remove console.log statements or replace with proper logging that can be disabled in "
        "production. Consider using a logging library that supports different log levels.",
    ),
    any_token_rule(
        "no-todo-comments",
        Severity.low,
        ("TODO", "FIXME"),
        "TODO or FIXME comment found",
        "Address the TODO/FIXME comments before deploying to production. If it's a known "
        "limitation, document it properly and create an issue in your project management system.",
    ),
)

PYTHON_RULES: tuple[Rule, ...] = (
    substring_rule(
        "no-exec",
        Severity.high,
        "exec(",
        "Use of exec() can lead to code injection vulnerabilities",
        "Avoid using exec() entirely. Restructure your code to use more specific functions or "
        "modules that perform the required functionality without executing arbitrary code.",
    ),
    substring_rule(
        "no-unsafe-deserialization",
        Severity.high,
        "pickle.loads",
        "Unsafe deserialization using pickle can lead to code execution",
        "Use safer serialization alternatives like JSON, YAML, or MessagePack. If pickle is "
        "necessary, only unpickle data from trusted sources and consider using safer modules "
        "like marshmallow.",
    ),
    sweep_rule(
        "validate-input",
        Severity.medium,
        "input(",
        "Input should be type-checked and sanitized",
        "Always validate and sanitize user input. Use type conversion functions like int() or "
        "float() with try/except blocks, or use input validation libraries like Pydantic.",
    ),
    substring_rule(
        "no-shell-true",
        Severity.medium,
        "shell=True",
        "Using shell=True with subprocess can be dangerous",
        "Avoid using shell=True with subprocess. Instead, pass the command as a list of "
        "arguments and set shell=False (the default). This prevents shell injection attacks.",
    ),
)

JAVA_RULES: tuple[Rule, ...] = (
    substring_rule(
        "no-runtime-exec",
        Severity.high,
        "Runtime.getRuntime().exec(",
        "Using Runtime.exec() can be dangerous for command execution",
        "Use ProcessBuilder instead, which has better security features. Always validate and "
        "sanitize any user input that goes into command execution.",
    ),
    substring_rule(
        "no-stacktrace-print",
        Severity.medium,
        "printStackTrace",
        "printStackTrace exposes implementation details",
        "Use a proper logging framework like SLF4J or Log4j. Pass exceptions to the logger "
        "rather than printing stack traces directly.",
    ),
    sweep_rule(
        "use-logger",
        Severity.low,
        "System.out.println",
        "System.out.println should be replaced with proper logging",
        "Replace System.out.println with a proper logging framework like SLF4J or Log4j. This "
        "provides better control over log levels and output destinations.",
    ),
    any_token_rule(
        "use-optional",
        Severity.low,
        (" == null", " != null"),
        "Consider using Optional to handle null values",
        "Use Java's Optional<T> type to represent optional values instead of null checks. This "
        "makes the API more explicit and helps prevent NullPointerExceptions.",
    ),
)

LANGUAGE_PROFILES = MappingProxyType({
    "js": JAVASCRIPT_RULES,
    "ts": JAVASCRIPT_RULES,
    "jsx": JAVASCRIPT_RULES,
    "tsx": JAVASCRIPT_RULES,
    "py": PYTHON_RULES,
    "java": JAVA_RULES,
})


def profile_for(file_extension: str) -> tuple[Rule, ...]:
    """Return the ordered rules for an extension, or an empty tuple."""
    return LANGUAGE_PROFILES.get(file_extension, ())


def supported_extensions() -> list[str]:
    """List the extensions that have a rule profile."""
    return sorted(LANGUAGE_PROFILES)
