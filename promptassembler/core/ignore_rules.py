# promptassembler/core/ignore_rules.py
import os
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern
from loguru import logger

from ..config.schema import IgnoreConfig

_GLOBSTAR = "\x00GLOBSTAR\x00"

@dataclass(frozen=True)
class _CompiledPattern:
    source: str
    regex: Pattern[str]
    directories_only: bool

def glob_to_regex(pattern: str) -> Pattern[str]:
    """
    Translates a glob into an anchored, case-insensitive regex.
    `*` and `?` never cross a '/', `**` matches anything.
    """
    escaped = re.sub(r"[.+^${}()|\[\]\\]", lambda m: "\\" + m.group(0), pattern)
    translated = (escaped
                  .replace("**", _GLOBSTAR)
                  .replace("*", "[^/]*")
                  .replace("?", "[^/]")
                  .replace(_GLOBSTAR, ".*"))
    return re.compile(f"^{translated}$", re.IGNORECASE)

class IgnoreRuleEngine:
    """Decides which names are skipped during recursive collection and tree rendering."""

    def __init__(self, config: Optional[IgnoreConfig] = None):
        self.config = config or IgnoreConfig()
        self._directories = set(self.config.directories)
        self._files = set(self.config.files)
        self._extensions = {ext.lower() for ext in self.config.extensions}
        self._patterns: List[_CompiledPattern] = []
        for raw in self.config.patterns:
            directories_only = raw.endswith("/")
            body = raw[:-1] if directories_only else raw
            if not body:
                logger.warning(f"Ignoring empty glob pattern '{raw}'")
                continue
            self._patterns.append(_CompiledPattern(raw, glob_to_regex(body), directories_only))
        logger.debug(f"Ignore rules: {len(self._directories)} dirs, {len(self._files)} files, "
                     f"{len(self._extensions)} extensions, {len(self._patterns)} patterns")

    @classmethod
    def default(cls) -> "IgnoreRuleEngine":
        return cls(IgnoreConfig())

    def should_ignore_directory(self, name: str) -> bool:
        if name in self._directories:
            return True
        return self._matches_patterns(name, is_dir=True)

    def should_ignore_file(self, name: str) -> bool:
        if name in self._files:
            return True

        ext = os.path.splitext(name)[1].lower()
        if ext and ext in self._extensions:
            return True

        return self._matches_patterns(name, is_dir=False)

    def should_ignore(self, name: str, is_dir: bool) -> bool:
        return self.should_ignore_directory(name) if is_dir else self.should_ignore_file(name)

    def _matches_patterns(self, name: str, is_dir: bool) -> bool:
        for pattern in self._patterns:
            if pattern.directories_only and not is_dir:
                continue
            if pattern.regex.match(name):
                logger.trace(f"Ignoring '{name}' due to pattern '{pattern.source}'")
                return True
        return False
