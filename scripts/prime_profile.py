"""CLI helper to prime a Renderbot profile with a manual login."""

from __future__ import annotations

import argparse

from renderbot.browser.session import BrowserSession
from renderbot.config import DEFAULT_PROFILE, ensure_protocol, env_browser, profile_dir


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Launch a headed browser on a profile so cookies from a manual login persist.",
    )
    parser.add_argument("url", help="Login page to open (e.g. localhost:4000/login)")
    parser.add_argument(
        "--profile",
        default=DEFAULT_PROFILE,
        help="Profile to prime (default: %(default)s).",
    )
    args = parser.parse_args()

    path = profile_dir(args.profile)
    with BrowserSession(path, browser=env_browser(), headless=False) as session:
        session.page.goto(ensure_protocol(args.url))
        input("Log in in the browser window, then press Enter to save the profile...")
    print(f"Profile {args.profile!r} stored at {path}")


if __name__ == "__main__":
    main()
