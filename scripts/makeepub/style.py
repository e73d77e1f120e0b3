"""
Stylesheet compilation and merging.

The theme stylesheet and the book's own stylesheet are compiled with the
same step and concatenated, theme first, so book rules win the cascade.
Plain .css is used as-is; .less and .scss/.sass go through the external
lessc / sass compilers.
"""

import os
import shutil
import subprocess

from makeepub.errors import StyleError


# extension → (env override, default executable, extra args)
COMPILERS = {
    ".less": ("LESSC", "lessc", []),
    ".scss": ("SASS", "sass", ["--no-source-map"]),
    ".sass": ("SASS", "sass", ["--no-source-map"]),
}


def compiler_for(path):
    """Return the compiler command (a list) for path, or None for plain CSS."""
    ext = os.path.splitext(path)[1].lower()
    if ext not in COMPILERS:
        return None
    env_var, default, args = COMPILERS[ext]
    return [os.environ.get(env_var) or default] + args


def compile_style(path):
    """Compile one stylesheet to CSS text."""
    if not os.path.exists(path):
        raise StyleError(f"Stylesheet not found: {path}")

    cmd = compiler_for(path)
    if cmd is None:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    tool = cmd[0]
    if not shutil.which(tool):
        raise StyleError(f"{tool} not found on PATH (needed for {path})")

    try:
        result = subprocess.run(cmd + [path], capture_output=True, text=True)
    except OSError as e:
        raise StyleError(f"Could not run {tool}: {e}") from e

    if result.returncode != 0:
        detail = "\n".join(result.stderr.strip().splitlines()[:20])
        raise StyleError(f"{tool} failed on {path} (exit {result.returncode})\n{detail}")

    return result.stdout


def merge_styles(theme_stylesheet, book_stylesheet=None):
    """Compile and concatenate theme rules, then book rules."""
    parts = []
    if theme_stylesheet:
        parts.append(compile_style(theme_stylesheet))
    if book_stylesheet:
        parts.append(compile_style(book_stylesheet))
    return "\n".join(part.rstrip("\n") for part in parts) + "\n"
