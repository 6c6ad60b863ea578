"""Command-line entry point: render a page and print it for an LLM."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv
from playwright.sync_api import Error

from renderbot.browser.core import Renderer
from renderbot.config import (
    DEFAULT_PROFILE,
    SUPPORTED_BROWSERS,
    FormField,
    RenderConfig,
    env_browser,
    env_headless,
    env_truncate_after,
)
from renderbot.errors import RenderError

EPILOG = """\
Phoenix LiveView support:
  LiveView pages are detected automatically. Renderbot waits for the socket
  to connect (.phx-connected), submits forms with Enter and follows
  phx:page-loading-start/stop events instead of page loads.

Console output:
  console.* calls and browser warnings/errors are appended to the output.
  Calls made before a full page load (form POST, --after-submit) are lost.

Examples:
  renderbot https://example.com
  renderbot https://example.com --screenshot page.png --truncate-after 5000
  renderbot localhost:4000/login --form login_form \\
      --input email --value test@example.com --input password --value secret
"""


class _InputAction(argparse.Action):
    """Start a new ``name``/``value`` pair; ``--value`` completes it."""

    def __call__(self, parser, namespace, values, option_string=None) -> None:
        pending = list(getattr(namespace, self.dest, None) or [])
        pending.append([values, None])
        setattr(namespace, self.dest, pending)


class _ValueAction(argparse.Action):
    def __call__(self, parser, namespace, values, option_string=None) -> None:
        pending = list(getattr(namespace, self.dest, None) or [])
        if not pending or pending[-1][1] is not None:
            parser.error("--value must follow an --input NAME")
        pending[-1][1] = values
        setattr(namespace, self.dest, pending)


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {raw!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {raw!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="renderbot",
        description="Portable web renderer for LLMs: load a page in a headless browser "
        "and print it as Markdown-flavoured text.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("url", help="Page to render (http:// is assumed when no scheme is given)")
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Output the raw page HTML instead of converting it to text.",
    )
    parser.add_argument(
        "--truncate-after",
        type=_positive_int,
        default=None,
        metavar="N",
        help="Truncate output after N characters and append a notice "
        "(default: $RENDERBOT_TRUNCATE_AFTER or 100000).",
    )
    parser.add_argument(
        "--screenshot",
        type=Path,
        default=None,
        metavar="PATH",
        help="Save a PNG screenshot of the page to PATH.",
    )
    parser.add_argument("--form", default=None, metavar="ID", help="The id of the form for inputs.")
    parser.add_argument(
        "--input",
        dest="inputs",
        action=_InputAction,
        metavar="NAME",
        help="Name attribute of a form input field (repeatable).",
    )
    parser.add_argument(
        "--value",
        dest="inputs",
        action=_ValueAction,
        metavar="VALUE",
        help="Value to fill for the preceding --input.",
    )
    parser.add_argument(
        "--after-submit",
        default=None,
        metavar="URL",
        help="After form submission and navigation, load URL before extracting text.",
    )
    parser.add_argument("--js", default=None, metavar="CODE", help="JavaScript to run after the page loads.")
    parser.add_argument(
        "--profile",
        default=DEFAULT_PROFILE,
        help="Use or create a named browser profile (default: %(default)s).",
    )
    parser.add_argument(
        "--browser",
        choices=sorted(SUPPORTED_BROWSERS),
        default=None,
        help="Playwright browser engine (default: $RENDERBOT_BROWSER or firefox).",
    )
    parser.add_argument("--headed", action="store_true", help="Show the browser window.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr.")
    return parser


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    fields: List[FormField] = []
    for name, value in args.inputs or []:
        if value is None:
            raise ValueError(f"--input {name} has no --value")
        fields.append(FormField(name=name, value=value))
    return RenderConfig(
        url=args.url,
        profile=args.profile,
        form_id=args.form,
        fields=tuple(fields),
        after_submit_url=args.after_submit,
        script=args.js,
        screenshot_path=args.screenshot,
        truncate_after=args.truncate_after or env_truncate_after(),
        raw=args.raw,
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        config = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    renderer = Renderer(
        headless=env_headless() and not args.headed,
        browser=args.browser or env_browser(),
    )
    try:
        result = renderer.render(config)
    except (RenderError, Error) as exc:
        print(f"Error processing request: {exc}", file=sys.stderr)
        return 1

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
