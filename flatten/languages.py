"""Fence language tags, looked up by file extension."""

from pathlib import Path


PLAIN_TEXT = "plain text"

EXT2LANG: dict[str, str] = {
    "py": "python",
    "pyi": "python",
    "rs": "rust",
    "go": "go",
    "c": "c",
    "h": "c",
    "cc": "c++",
    "cpp": "c++",
    "cxx": "c++",
    "hpp": "c++",
    "hh": "c++",
    "cs": "c#",
    "java": "java",
    "kt": "kotlin",
    "scala": "scala",
    "swift": "swift",
    "m": "objective-c",
    "rb": "ruby",
    "php": "php",
    "pl": "perl",
    "lua": "lua",
    "r": "r",
    "hs": "haskell",
    "ml": "ocaml",
    "erl": "erlang",
    "ex": "elixir",
    "exs": "elixir",
    "clj": "clojure",
    "lisp": "lisp",
    "el": "lisp",
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "html": "html",
    "htm": "html",
    "css": "css",
    "scss": "scss",
    "sass": "sass",
    "xml": "xml",
    "svg": "xml",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "toml": "toml",
    "ini": "ini",
    "cfg": "ini",
    "md": "markdown",
    "markdown": "markdown",
    "rst": "restructuredtext",
    "tex": "latex",
    "sql": "sql",
    "sh": "bash",
    "bash": "bash",
    "zsh": "zsh",
    "ps1": "powershell",
    "bat": "batch file",
    "cmd": "batch file",
    "diff": "diff",
    "patch": "diff",
    "d": "d",
    "groovy": "groovy",
    "gradle": "groovy",
    "txt": PLAIN_TEXT,
}

NAME2LANG: dict[str, str] = {
    "Makefile": "makefile",
    "GNUmakefile": "makefile",
    "Dockerfile": "dockerfile",
    "Rakefile": "ruby",
    "Gemfile": "ruby",
}


def language_for(path: str | Path) -> str:
    """Guess the fence tag of a file, falling back to plain text."""
    path = Path(path)
    suffix = path.suffix[1:].lower()
    if suffix:
        return EXT2LANG.get(suffix, PLAIN_TEXT)
    return NAME2LANG.get(path.name, PLAIN_TEXT)
