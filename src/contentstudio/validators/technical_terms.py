"""Remove common programming terms before AI language detection.

Technical lessons written in Spanish or French are full of English keywords
("async", "docker", "API"); left in, they pull the detector toward English.
"""

import re
from typing import Optional

TECHNICAL_TERMS = frozenset(
    [
        # Programming keywords
        "if", "else", "for", "while", "function", "class", "const", "let", "var",
        "return", "import", "export", "async", "await", "promise", "callback",
        "try", "catch", "throw", "finally", "switch", "case", "break", "continue",
        "true", "false", "null", "undefined", "this", "super", "extends", "implements",
        # Technologies and frameworks
        "docker", "kubernetes", "react", "vue", "angular", "node", "express",
        "api", "rest", "graphql", "json", "xml", "html", "css", "javascript",
        "typescript", "python", "java", "csharp", "php", "ruby", "go", "rust",
        "sql", "nosql", "mongodb", "postgresql", "mysql", "redis",
        "git", "github", "gitlab", "npm", "yarn", "webpack", "babel",
        # Common technical vocabulary
        "server", "client", "database", "backend", "frontend", "fullstack",
        "devops", "ci", "cd", "deployment", "production", "staging", "development",
        "http", "https", "tcp", "udp", "ip", "dns", "ssl", "tls",
        "oauth", "jwt", "token", "authentication", "authorization",
        "algorithm", "array", "object", "string", "number",
        "boolean", "integer", "float", "double", "char", "byte",
        # Abbreviations
        "ui", "ux", "dom", "ajax", "cors", "csp", "xss", "csrf",
        "crud", "mvc", "mvp", "mvvm", "orm", "odm",
    ]
)

TECHNICAL_PHRASES = (
    "data structure",
    "npm install",
    "git push",
    "git pull",
    "git commit",
    "git clone",
    "docker run",
    "docker build",
    "docker compose",
)

_PHRASE_PATTERN = re.compile(
    r"\b(?:"
    + "|".join(r"\s+".join(map(re.escape, phrase.split())) for phrase in TECHNICAL_PHRASES)
    + r")\b",
    re.IGNORECASE,
)
_TOKEN_SPLIT = re.compile(r"(\s+|[,;:!?()\[\]{}'\"`])")
_CONNECTORS = re.compile(r"[-_./]")
_NON_ALNUM = re.compile(r"[^a-z0-9]")


def is_technical_term(word: str) -> bool:
    """True for a keyword ("async"), a compound of keywords ("docker-compose", "node.js")
    or a keyword with trailing punctuation ("API.")."""
    lowered = word.lower().strip()
    if not lowered:
        return False

    cleaned = _NON_ALNUM.sub("", lowered)
    if not cleaned:
        return False
    if cleaned in TECHNICAL_TERMS:
        return True

    if _CONNECTORS.search(lowered):
        parts = [_NON_ALNUM.sub("", part) for part in _CONNECTORS.split(lowered)]
        return any(part in TECHNICAL_TERMS for part in parts if part)
    return False


def filter_technical_terms(text: Optional[str]) -> Optional[str]:
    """Strip technical terms and collapse the remaining whitespace.

    Example:
        >>> filter_technical_terms("Usamos docker y la API para desplegar")
        'Usamos y la para desplegar'
    """
    if not text or not isinstance(text, str):
        return text

    without_phrases = _PHRASE_PATTERN.sub(" ", text)
    tokens = _TOKEN_SPLIT.split(without_phrases)
    kept = ["" if is_technical_term(token) else token for token in tokens]
    return re.sub(r"\s+", " ", "".join(kept)).strip()
