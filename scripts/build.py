#!/usr/bin/env python3
"""
Build script for makeepub.

Renders a directory of markdown chapters described by metadata.yaml into
a build directory, then packs the build directory into an EPUB.

Usage:
    python build.py mybook                    Build and pack mybook/
    python build.py mybook book.epub          Write the archive to book.epub
    python build.py mybook -c                 Build only, do not pack
    python build.py mybook -p                 Pack an existing build
    python build.py mybook -t ./my-theme      Use a theme directory
    python build.py mybook -b /tmp/build      Use another build directory

Requires: Markdown, PyYAML
Optional: lessc (.less stylesheets), sass (.scss/.sass stylesheets)
"""

import os
import sys
import argparse
import traceback

# Ensure makeepub is importable from the scripts/ directory
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from makeepub.builders import BUILDERS, DEFAULT_FORMAT
from makeepub.errors import MakeEpubError
from makeepub.resolve import DEFAULT_THEME, available_themes, resolve_dir, resolve_theme


# ── Resolve inputs ─────────────────────────────────────────────────────


def resolve_inputs(args, cwd=None):
    """Turn parsed arguments into absolute paths. Exits on failure."""
    cwd = cwd or os.getcwd()

    source_dir = resolve_dir(args.source or ".", cwd)
    if not os.path.isdir(source_dir):
        print(f"Error: Source directory not found: {source_dir}")
        sys.exit(1)

    theme_dir = resolve_theme(args.theme, cwd)
    if not theme_dir:
        print(f"Error: Could not find theme '{args.theme}'")
        print(f"  Built-in themes: {', '.join(available_themes()) or '(none)'}")
        sys.exit(1)

    build_dir = resolve_dir(args.build_dir, cwd) if args.build_dir else os.path.join(source_dir, "_build")
    metadata_path = resolve_dir(args.metadata, cwd) if args.metadata else None
    output_file = resolve_dir(args.output, cwd) if args.output else None

    return {
        "source_dir": source_dir,
        "theme_dir": theme_dir,
        "build_dir": build_dir,
        "metadata_path": metadata_path,
        "output_file": output_file,
    }


def select_steps(args):
    """(build, pack) flags: -c builds only, -p packs only, neither does both."""
    if args.compile_only or args.pack_only:
        return args.compile_only, args.pack_only
    return True, True


# ── Build command ──────────────────────────────────────────────────────


def cmd_build(args):
    inputs = resolve_inputs(args)
    build, pack = select_steps(args)

    builder = BUILDERS[DEFAULT_FORMAT](verbose=args.verbose, **inputs)

    try:
        builder.load()
        builder.config.summary()
        print(f"  Theme:  {inputs['theme_dir']}")
        print(f"  Build:  {inputs['build_dir']}")
        builder.run(build=build, pack=pack)
    except (MakeEpubError, OSError) as e:
        print(f"\n  ✗ Error: {e}")
        sys.exit(1)

    print(f"\n{'─' * 60}")
    print("  Done.")


# ── Argument Parser ────────────────────────────────────────────────────


def build_parser():
    parser = argparse.ArgumentParser(
        description="Build an EPUB from markdown chapters and metadata.yaml",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s mybook                  Build and pack mybook/
  %(prog)s mybook out.epub         Build and pack to out.epub
  %(prog)s mybook -c               Build only
  %(prog)s mybook -p               Pack a previous build
        """,
    )
    parser.add_argument("source", nargs="?", help="Book source directory (default: .)")
    parser.add_argument("output", nargs="?", help="Output .epub (default: <build_dir>/output.epub)")

    opts = parser.add_argument_group("options")
    opts.add_argument("-b", "--build-dir", help="Build directory (default: <source>/_build)")
    opts.add_argument("-t", "--theme", default=DEFAULT_THEME, help="Theme name or directory")
    opts.add_argument("-m", "--metadata", help="Path to metadata.yaml")
    opts.add_argument("--verbose", "-v", action="store_true")

    mode = parser.add_argument_group("mode")
    mode.add_argument("-c", "--compile-only", action="store_true", help="Build only, do not pack")
    mode.add_argument("-p", "--pack-only", action="store_true", help="Pack only, do not build")

    return parser


# ── Main ───────────────────────────────────────────────────────────────


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    cmd_build(args)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)
    except Exception as e:
        log_path = "build_error.log"
        with open(log_path, "w") as f:
            traceback.print_exc(file=f)
        print(f"\nUnexpected error: {e}")
        print(f"Full traceback written to {log_path}")
        sys.exit(1)
