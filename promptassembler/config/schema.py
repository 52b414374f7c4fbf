# promptassembler/config/schema.py
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional

class SortOrder(str, Enum):
    OPENING_ORDER = "openingOrder"
    FILE_PATH = "filePath"

class FormatPreset(str, Enum):
    XML = "xml"            # <Content src="..." lang="...">...</Content>
    MARKDOWN = "markdown"  # fenced code block
    PLAIN = "plain"        # content only
    GITHUB = "github"      # path comment + fenced block
    CUSTOM = "custom"      # plugin, injected callable or template

class IgnoreConfig(BaseModel):
    # Exact directory names
    directories: List[str] = Field(default_factory=lambda: [
        ".git", ".svn", ".hg",
        "node_modules", "__pycache__",
        ".venv", "venv", ".env",
        "dist", "build", ".next", ".nuxt",
        "coverage", ".nyc_output",
        ".cache", ".parcel-cache", ".turbo",
        "out", "target",
    ])
    # Exact file names
    files: List[str] = Field(default_factory=lambda: [
        ".DS_Store", "Thumbs.db",
        ".gitignore", ".gitattributes",
        "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
        "composer.lock", "Cargo.lock", "Gemfile.lock", "poetry.lock",
    ])
    # Matched against the last extension segment, case-insensitive
    extensions: List[str] = Field(default_factory=lambda: [
        ".pyc", ".pyo", ".pyd",
        ".so", ".dll", ".dylib",
        ".class", ".o", ".obj", ".exe", ".bin",
        ".map", ".min.js", ".min.css",
    ])
    # Globs: *, ?, ** ; a trailing "/" restricts the pattern to directories
    patterns: List[str] = Field(default_factory=list)

class FormatConfig(BaseModel):
    preset: FormatPreset = FormatPreset.XML
    # string.Template text, e.g. "// $location\n$content"
    custom_template: Optional[str] = None
    # Name of a registered formatter plugin
    custom_plugin: Optional[str] = None

class AppConfig(BaseModel):
    ignore: IgnoreConfig = Field(default_factory=IgnoreConfig)
    format: FormatConfig = Field(default_factory=FormatConfig)
    sort_order: SortOrder = SortOrder.OPENING_ORDER
    resolve_timeout: float = Field(default=30.0, gt=0) # Seconds per dynamic item
    git_timeout: float = Field(default=15.0, gt=0)
    terminal_capture_delay: float = Field(default=0.3, ge=0)
    instruction_max_length: int = Field(default=5000, gt=0)
    edit_max_length: int = Field(default=50000, gt=0)
    max_context_tokens: int = 128000 # Warn above this when building
