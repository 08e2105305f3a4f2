"""Map free-form code fence languages to Notion's code block languages.

Notion rejects a code block whose ``language`` is not in its fixed list,
so every language that comes out of the HTML has to be normalized before
it is sent.  Unknown languages fall back to ``"plain text"``.
"""

from __future__ import annotations

PLAIN_TEXT = "plain text"

# Languages accepted by the Notion API for code blocks.
NOTION_LANGUAGES: frozenset[str] = frozenset({
    "abap", "arduino", "bash", "basic", "c", "clojure", "coffeescript",
    "c++", "c#", "css", "dart", "diff", "docker", "elixir", "elm",
    "erlang", "flow", "fortran", "f#", "gherkin", "glsl", "go", "graphql",
    "groovy", "haskell", "html", "java", "javascript", "json", "julia",
    "kotlin", "latex", "less", "lisp", "livescript", "lua", "makefile",
    "markdown", "markup", "matlab", "mermaid", "nix", "objective-c",
    "ocaml", "pascal", "perl", "php", "plain text", "powershell",
    "prolog", "protobuf", "python", "r", "reason", "ruby", "rust",
    "sass", "scala", "scheme", "scss", "shell", "sql", "swift",
    "typescript", "vb.net", "verilog", "vhdl", "visual basic",
    "webassembly", "xml", "yaml", "java/c/c++/c#",
})

LANGUAGE_ALIASES: dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "rb": "ruby",
    "sh": "shell",
    "bash": "shell",
    "zsh": "shell",
    "yml": "yaml",
    "md": "markdown",
    "jsx": "javascript",
    "tsx": "typescript",
    # Common spellings that are not Notion names either.
    "cpp": "c++",
    "cs": "c#",
    "csharp": "c#",
    "golang": "go",
    "rs": "rust",
    "kt": "kotlin",
    "dockerfile": "docker",
    "tex": "latex",
    "ps1": "powershell",
}

_CLASS_PREFIX = "language-"


def normalize_language(info: str | None) -> str:
    """Return the Notion language name for a fence tag or CSS class.

    Rules, in order: empty or already ``"plain text"`` passes through;
    the value is lower-cased, trimmed and stripped of a ``language-``
    prefix; aliases are resolved; names Notion accepts are returned as
    is; anything else becomes ``"plain text"``.

    >>> normalize_language("JS")
    'javascript'
    >>> normalize_language("language-py")
    'python'
    >>> normalize_language("brainfuck")
    'plain text'
    """
    if not info or info == PLAIN_TEXT:
        return PLAIN_TEXT

    lang = info.strip().lower()
    if lang.startswith(_CLASS_PREFIX):
        lang = lang[len(_CLASS_PREFIX):]

    if lang in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[lang]
    if lang in NOTION_LANGUAGES:
        return lang
    return PLAIN_TEXT
