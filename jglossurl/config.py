"""
Configuration management for jglossurl.

Supports JSON config files and CLI overrides.
"""

import json
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from jglossurl.forwarding import DEFAULT_SERVLET_NAME
from jglossurl.policy import ForwardingPolicy, HTTP_PROTOCOLS

SECTIONS = ("servlet", "forwarding", "output")


@dataclass
class ServletSettings:
    """Where the forwarding servlet lives."""
    servlet_url: str = f"http://localhost:8080/{DEFAULT_SERVLET_NAME}"
    servlet_name: str = DEFAULT_SERVLET_NAME   # Appended to the page URL's directory
    servlet_path: str = f"/{DEFAULT_SERVLET_NAME}"  # Forwarding to this path is refused


@dataclass
class ForwardingSettings:
    """Forwarding policy and composer defaults."""
    allowed_protocols: list[str] = field(default_factory=lambda: list(HTTP_PROTOCOLS))
    enable_cookie_forwarding: bool = False
    enable_secure_insecure_cookie_forwarding: bool = False
    enable_form_data_forwarding: bool = False
    enable_secure_insecure_form_data_forwarding: bool = False

    # Flags set on composed URLs
    forward_cookies: bool = False
    forward_form_data: bool = False


@dataclass
class OutputSettings:
    """Output settings."""
    json: bool = False                   # Plain JSON instead of rich output
    verbose: bool = False
    color: bool = True


@dataclass
class JGlossURLConfig:
    """Complete jglossurl configuration."""
    servlet: ServletSettings = field(default_factory=ServletSettings)
    forwarding: ForwardingSettings = field(default_factory=ForwardingSettings)
    output: OutputSettings = field(default_factory=OutputSettings)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {section: asdict(getattr(self, section)) for section in SECTIONS}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JGlossURLConfig":
        """Create config from dictionary. Unknown keys are ignored.

        Raises ValueError if the data or one of its sections is not a JSON
        object.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Config must be a JSON object, not {type(data).__name__}")

        config = cls()
        for section in SECTIONS:
            values = data.get(section)
            if values is None:
                continue
            if not isinstance(values, dict):
                raise ValueError(f"Config section {section!r} must be an object, not {type(values).__name__}")
            settings = getattr(config, section)
            for key, value in values.items():
                if hasattr(settings, key):
                    setattr(settings, key, value)

        return config

    @classmethod
    def from_file(cls, filepath: str | Path) -> "JGlossURLConfig":
        """Read a JSON config file. A missing file raises FileNotFoundError."""
        return cls.from_dict(json.loads(Path(filepath).read_text(encoding="utf-8")))

    def save(self, filepath: str | Path):
        """Write the config as JSON, creating parent directories."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")

    def forwarding_policy(self) -> ForwardingPolicy:
        """Servlet forwarding policy described by this config."""
        fwd = self.forwarding
        return ForwardingPolicy(
            allowed_protocols=[p.lower() for p in fwd.allowed_protocols],
            enable_cookie_forwarding=fwd.enable_cookie_forwarding,
            enable_secure_insecure_cookie_forwarding=fwd.enable_secure_insecure_cookie_forwarding,
            enable_form_data_forwarding=fwd.enable_form_data_forwarding,
            enable_secure_insecure_form_data_forwarding=fwd.enable_secure_insecure_form_data_forwarding,
        )

    @classmethod
    def user_config_path(cls) -> Path:
        """$XDG_CONFIG_HOME/jglossurl/config.json, falling back to ~/.config."""
        base = os.environ.get("XDG_CONFIG_HOME")
        return Path(base or Path.home() / ".config") / "jglossurl" / "config.json"

    @classmethod
    def load_user_config(cls) -> "JGlossURLConfig":
        """The user's config file if there is one, else the built-in defaults."""
        try:
            return cls.from_file(cls.user_config_path())
        except FileNotFoundError:
            return cls()


def generate_example_config() -> str:
    """Generate example configuration JSON."""
    config = JGlossURLConfig()

    config.servlet.servlet_url = "https://example.com/jgloss/jgloss-www"
    config.forwarding.enable_cookie_forwarding = True
    config.forwarding.enable_form_data_forwarding = True

    return json.dumps(config.to_dict(), indent=2)


# Preset configurations
PRESETS = {
    "strict": JGlossURLConfig(
        forwarding=ForwardingSettings(
            allowed_protocols=["http", "https"],
        ),
    ),
    "open": JGlossURLConfig(
        forwarding=ForwardingSettings(
            allowed_protocols=["http", "https", "ftp"],
            enable_cookie_forwarding=True,
            enable_secure_insecure_cookie_forwarding=True,
            enable_form_data_forwarding=True,
            enable_secure_insecure_form_data_forwarding=True,
            forward_cookies=True,
            forward_form_data=True,
        ),
    ),
}


def get_preset(name: str) -> JGlossURLConfig:
    """Get a copy of a preset configuration."""
    if name not in PRESETS:
        raise ValueError(f"Unknown preset: {name}. Available: {list(PRESETS.keys())}")
    return JGlossURLConfig.from_dict(PRESETS[name].to_dict())
