# promptassembler/sources/languages.py
from pathlib import PurePath

_EXTENSION_LANGUAGES = {
    "py": "python",
    "pyi": "python",
    "ts": "typescript",
    "tsx": "typescriptreact",
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "jsx": "javascriptreact",
    "json": "json",
    "md": "markdown",
    "yml": "yaml",
    "yaml": "yaml",
    "toml": "toml",
    "sh": "shellscript",
    "bash": "shellscript",
    "zsh": "shellscript",
    "ps1": "powershell",
    "bat": "bat",
    "ini": "ini",
    "cfg": "ini",
    "xml": "xml",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "less": "less",
    "java": "java",
    "kt": "kotlin",
    "c": "c",
    "h": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "hpp": "cpp",
    "cs": "csharp",
    "go": "go",
    "rs": "rust",
    "rb": "ruby",
    "php": "php",
    "swift": "swift",
    "sql": "sql",
    "lua": "lua",
    "r": "r",
    "vue": "vue",
    "txt": "plaintext",
}

_FILENAME_LANGUAGES = {
    "dockerfile": "dockerfile",
    "makefile": "makefile",
}

def language_for(path: str | PurePath) -> str:
    """Infer a highlighting language id from the file name."""
    pure = PurePath(path)
    by_name = _FILENAME_LANGUAGES.get(pure.name.lower())
    if by_name:
        return by_name
    ext = pure.suffix.lower().lstrip(".")
    return _EXTENSION_LANGUAGES.get(ext, "plaintext")
