"""Run configuration objects for Renderbot.

The CLI and the MCP server both resolve their inputs into a
:class:`RenderConfig`; the engine never parses options itself.  Timeouts and
the push-framework markers live in small frozen dataclasses so a single
object controls every wait of a run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple

DEFAULT_TRUNCATE_AFTER = 100000
DEFAULT_PROFILE = "default"
DEFAULT_BROWSER = "firefox"
SUPPORTED_BROWSERS = {"firefox", "chromium", "webkit"}

HOME_ENV = "RENDERBOT_HOME"
TRUNCATE_ENV = "RENDERBOT_TRUNCATE_AFTER"
BROWSER_ENV = "RENDERBOT_BROWSER"
HEADLESS_ENV = "RENDERBOT_HEADLESS"

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class FormField:
    """A single ``input[name=...]`` value to type into the form."""

    name: str
    value: str


@dataclass(frozen=True)
class PushFramework:
    """DOM markers and events identifying a push-rendered page."""

    name: str
    marker_selector: str
    connected_selector: str
    loading_start_event: str
    loading_stop_event: str


PHOENIX_LIVEVIEW = PushFramework(
    name="Phoenix LiveView",
    marker_selector="[data-phx-session]",
    connected_selector=".phx-connected",
    loading_start_event="phx:page-loading-start",
    loading_stop_event="phx:page-loading-stop",
)


@dataclass(frozen=True)
class WaitPolicy:
    """Every bounded wait of a run, in seconds."""

    poll_interval: float = 0.1
    connect_timeout: float = 10.0
    loading_start_timeout: float = 1.0
    loading_stop_timeout: float = 10.0
    url_change_timeout: float = 5.0
    ready_state_timeout: float = 5.0
    dynamic_settle: float = 0.1
    static_settle: float = 0.2
    url_stabilize: float = 0.5


@dataclass(frozen=True)
class RenderConfig:
    """Fully resolved inputs for one render run."""

    url: str
    profile: str = DEFAULT_PROFILE
    form_id: Optional[str] = None
    fields: Tuple[FormField, ...] = field(default_factory=tuple)
    after_submit_url: Optional[str] = None
    script: Optional[str] = None
    screenshot_path: Optional[Path] = None
    truncate_after: int = DEFAULT_TRUNCATE_AFTER
    raw: bool = False

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ValueError("url must be a non-empty string.")
        if not self.profile or "/" in self.profile or self.profile in {".", ".."}:
            raise ValueError(f"Invalid profile name: {self.profile!r}.")
        if self.truncate_after <= 0:
            raise ValueError("truncate_after must be a positive integer.")
        object.__setattr__(self, "fields", tuple(self.fields))

    @property
    def target_url(self) -> str:
        return ensure_protocol(self.url)

    @property
    def resolved_after_submit_url(self) -> Optional[str]:
        if not self.after_submit_url:
            return None
        return ensure_protocol(self.after_submit_url)

    @property
    def wants_form(self) -> bool:
        return bool(self.form_id) and bool(self.fields)


def ensure_protocol(url: str) -> str:
    """Prefix ``http://`` when ``url`` carries no http(s) scheme."""
    target = url.strip()
    if target.startswith("http://") or target.startswith("https://"):
        return target
    return "http://" + target


def parse_fields(entries: Mapping[str, object] | Sequence[object] | None) -> Tuple[FormField, ...]:
    """Normalize caller-supplied field specs into ordered ``FormField`` pairs.

    Accepts a mapping of name to value, or a sequence of ``(name, value)``
    pairs / ``{"name": ..., "value": ...}`` mappings.  Order is kept and
    duplicate names are passed through untouched.
    """
    if entries is None:
        return ()
    pairs: list[FormField] = []
    if isinstance(entries, Mapping):
        for name, value in entries.items():
            pairs.append(FormField(str(name), "" if value is None else str(value)))
        return tuple(pairs)
    for entry in entries:
        if isinstance(entry, FormField):
            pairs.append(entry)
        elif isinstance(entry, Mapping):
            if "name" not in entry or "value" not in entry:
                raise ValueError("Each field mapping must include 'name' and 'value'.")
            pairs.append(FormField(str(entry["name"]), str(entry["value"])))
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            name, value = entry
            pairs.append(FormField(str(name), str(value)))
        else:
            raise TypeError(
                "fields must be a mapping, or a sequence of "
                "two-tuples/mappings with 'name' and 'value'."
            )
    for item in pairs:
        if not item.name.strip():
            raise ValueError("Field name must be a non-empty string.")
    return tuple(pairs)


def renderbot_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    configured = env.get(HOME_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".renderbot"


def profile_dir(profile: str, *, home: Optional[Path] = None) -> Path:
    """Return the persistent profile directory for ``profile``."""
    root = home if home is not None else renderbot_home()
    return root / "profiles" / profile


def env_truncate_after(environ: Optional[Mapping[str, str]] = None) -> int:
    env = os.environ if environ is None else environ
    raw = env.get(TRUNCATE_ENV)
    if not raw:
        return DEFAULT_TRUNCATE_AFTER
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_TRUNCATE_AFTER
    return value if value > 0 else DEFAULT_TRUNCATE_AFTER


def env_browser(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    name = (env.get(BROWSER_ENV) or DEFAULT_BROWSER).strip().lower()
    return name if name in SUPPORTED_BROWSERS else DEFAULT_BROWSER


def env_headless(environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    raw = env.get(HEADLESS_ENV)
    if raw is None:
        return True
    return raw.strip().lower() not in _FALSE_VALUES


__all__ = [
    "DEFAULT_BROWSER",
    "DEFAULT_PROFILE",
    "DEFAULT_TRUNCATE_AFTER",
    "FormField",
    "PHOENIX_LIVEVIEW",
    "PushFramework",
    "RenderConfig",
    "SUPPORTED_BROWSERS",
    "WaitPolicy",
    "ensure_protocol",
    "env_browser",
    "env_headless",
    "env_truncate_after",
    "parse_fields",
    "profile_dir",
    "renderbot_home",
]
