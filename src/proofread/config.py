# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Configuration management for Local Proofread.

Loads settings from ~/.proofread/config.toml with sensible defaults,
then applies PROOFREAD_* environment overrides (a .env file found from
the working directory is read first).
"""

import fcntl
import os
import re
import sys
import threading
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Literal, Optional
from urllib.parse import urlparse

from dotenv import dotenv_values, find_dotenv

from .prompts import GRAMMAR_SYSTEM_PROMPT

CONFIG_DIR = Path.home() / ".proofread"
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Available grammar backends
GRAMMAR_BACKENDS = ("ollama", "lm_studio")
GrammarBackendType = Literal["ollama", "lm_studio"]

DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_LM_STUDIO_HOST = "http://localhost:1234"

# Environment variables recognised on top of config.toml
ENV_MODEL = "PROOFREAD_MODEL"
ENV_SYSTEM_PROMPT = "PROOFREAD_SYSTEM_PROMPT"
ENV_API_HOST = "PROOFREAD_API_HOST"
ENV_BACKEND = "PROOFREAD_BACKEND"

# Default configuration
DEFAULT_CONFIG = """# Local Proofread Configuration
# Edit this file to customize behavior.
# PROOFREAD_MODEL, PROOFREAD_SYSTEM_PROMPT, PROOFREAD_API_HOST and
# PROOFREAD_BACKEND override the values below.

[grammar]
# Streaming backend: "ollama" or "lm_studio"
backend = "ollama"

# Model identifier. Submissions are ignored while this is empty.
model = ""

# System instruction sent with every request.
# Leave commented out to use the built-in grammar instruction.
# system_prompt = ""

[ollama]
# Ollama server (the /api/generate path is appended)
host = "http://localhost:11434"

# Keep model hot in memory between requests (e.g. "30s", "5m", "1h", "-1" for indefinite)
keep_alive = "60m"

# Context window size (0 = use model default)
num_ctx = 0

# Read timeout in seconds while streaming (0 = no limit)
timeout = 0

[lm_studio]
# LM Studio server (OpenAI-compatible, /v1/chat/completions is appended)
host = "http://localhost:1234"

# Maximum tokens to generate (0 = no limit, uses default 2048)
max_tokens = 0

# Read timeout in seconds while streaming (0 = no limit)
timeout = 0

[ui]
# Colorize output and render the word diff with ANSI styles
color = true

# Show the word diff after each correction
show_diff = true

# Copy the corrected text to the clipboard after each correction
auto_copy = false
"""


@dataclass
class GrammarConfig:
    """Model and instruction used for every correction."""
    backend: GrammarBackendType = "ollama"
    model: str = ""
    system_prompt: str = GRAMMAR_SYSTEM_PROMPT


@dataclass
class OllamaConfig:
    """Ollama-specific settings."""
    host: str = DEFAULT_OLLAMA_HOST
    keep_alive: str = "60m"
    num_ctx: int = 0
    timeout: int = 0

    @property
    def url(self) -> str:
        return self.host.rstrip("/") + "/api/generate"


@dataclass
class LMStudioConfig:
    """LM Studio-specific settings."""
    host: str = DEFAULT_LM_STUDIO_HOST
    max_tokens: int = 0
    timeout: int = 0

    @property
    def url(self) -> str:
        return self.host.rstrip("/") + "/v1/chat/completions"


@dataclass
class UIConfig:
    color: bool = True
    show_diff: bool = True
    auto_copy: bool = False


@dataclass
class Config:
    grammar: GrammarConfig = field(default_factory=GrammarConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    lm_studio: LMStudioConfig = field(default_factory=LMStudioConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    @property
    def api_host(self) -> str:
        """Host of the currently selected backend."""
        if self.grammar.backend == "lm_studio":
            return self.lm_studio.host
        return self.ollama.host


def load_config() -> Config:
    """Load configuration from file, creating default if missing."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    try:
        CONFIG_DIR.chmod(0o700)
    except OSError:
        pass

    # Create default config if it doesn't exist
    if not CONFIG_FILE.exists():
        CONFIG_FILE.write_text(DEFAULT_CONFIG, encoding='utf-8')

    # Load and parse config
    data = {}
    try:
        with open(CONFIG_FILE, 'rb') as f:
            data = tomllib.load(f)
    except Exception as e:
        print(f"Config parse error: {e}", file=sys.stderr)

    # Build config object with defaults
    config = Config()

    # Grammar settings
    if 'grammar' in data:
        config.grammar = GrammarConfig(
            backend=data['grammar'].get('backend', config.grammar.backend),
            model=data['grammar'].get('model', config.grammar.model),
            system_prompt=data['grammar'].get('system_prompt', config.grammar.system_prompt),
        )

    # Ollama settings
    if 'ollama' in data:
        config.ollama = OllamaConfig(
            host=data['ollama'].get('host', config.ollama.host),
            keep_alive=data['ollama'].get('keep_alive', config.ollama.keep_alive),
            num_ctx=data['ollama'].get('num_ctx', config.ollama.num_ctx),
            timeout=data['ollama'].get('timeout', config.ollama.timeout),
        )

    # LM Studio settings
    if 'lm_studio' in data:
        config.lm_studio = LMStudioConfig(
            host=data['lm_studio'].get('host', config.lm_studio.host),
            max_tokens=data['lm_studio'].get('max_tokens', config.lm_studio.max_tokens),
            timeout=data['lm_studio'].get('timeout', config.lm_studio.timeout),
        )

    # UI settings
    if 'ui' in data:
        config.ui = UIConfig(
            color=data['ui'].get('color', config.ui.color),
            show_diff=data['ui'].get('show_diff', config.ui.show_diff),
            auto_copy=data['ui'].get('auto_copy', config.ui.auto_copy),
        )

    # Environment wins over the file
    _apply_env_overrides(config, _read_environment())

    # Validate and sanitize config values
    _validate_config(config)

    return config


def _read_environment() -> Dict[str, str]:
    """
    Collect PROOFREAD_* variables.

    Values from a .env file are used only where the real environment
    does not already define the variable.
    """
    env: Dict[str, str] = {}
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        for key, value in dotenv_values(dotenv_path).items():
            if key.startswith("PROOFREAD_") and value is not None:
                env[key] = value
    for key, value in os.environ.items():
        if key.startswith("PROOFREAD_"):
            env[key] = value
    return env


def _apply_env_overrides(config: Config, env: Dict[str, str]):
    """Apply environment overrides onto a loaded config."""
    if ENV_BACKEND in env:
        config.grammar.backend = env[ENV_BACKEND].strip()

    if ENV_MODEL in env:
        config.grammar.model = env[ENV_MODEL].strip()

    # An empty value is honoured: it sends no system instruction
    if ENV_SYSTEM_PROMPT in env:
        config.grammar.system_prompt = env[ENV_SYSTEM_PROMPT]

    if env.get(ENV_API_HOST):
        host = env[ENV_API_HOST].strip()
        if config.grammar.backend == "lm_studio":
            config.lm_studio.host = host
        else:
            config.ollama.host = host


def _is_valid_url(url: str) -> bool:
    """Check if a string is a valid HTTP/HTTPS URL."""
    try:
        result = urlparse(url)
        return result.scheme in ("http", "https") and bool(result.netloc)
    except (ValueError, AttributeError):
        return False


def _validate_config(config: Config):
    """Validate and sanitize configuration values."""
    if config.grammar.backend not in GRAMMAR_BACKENDS:
        print(f"Config warning: Invalid grammar backend '{config.grammar.backend}', using 'ollama'", file=sys.stderr)
        config.grammar.backend = "ollama"

    if not isinstance(config.grammar.model, str):
        print("Config warning: model must be a string, ignoring", file=sys.stderr)
        config.grammar.model = ""

    if not isinstance(config.grammar.system_prompt, str):
        print("Config warning: system_prompt must be a string, using built-in instruction", file=sys.stderr)
        config.grammar.system_prompt = GRAMMAR_SYSTEM_PROMPT

    # Host validation
    if not _is_valid_url(config.ollama.host):
        print(f"Config warning: Invalid ollama host '{config.ollama.host}', using default", file=sys.stderr)
        config.ollama.host = DEFAULT_OLLAMA_HOST

    if not _is_valid_url(config.lm_studio.host):
        print(f"Config warning: Invalid lm_studio host '{config.lm_studio.host}', using default", file=sys.stderr)
        config.lm_studio.host = DEFAULT_LM_STUDIO_HOST

    # Numeric limits
    if not isinstance(config.ollama.num_ctx, int) or config.ollama.num_ctx < 0:
        print("Config warning: ollama num_ctx must be a non-negative integer, using 0 (model default)", file=sys.stderr)
        config.ollama.num_ctx = 0

    if not isinstance(config.ollama.timeout, int) or config.ollama.timeout < 0:
        print("Config warning: ollama timeout must be a non-negative integer, using 0 (unlimited)", file=sys.stderr)
        config.ollama.timeout = 0

    if not isinstance(config.lm_studio.max_tokens, int) or config.lm_studio.max_tokens < 0:
        print("Config warning: lm_studio max_tokens must be a non-negative integer, using 0 (default)", file=sys.stderr)
        config.lm_studio.max_tokens = 0

    if not isinstance(config.lm_studio.timeout, int) or config.lm_studio.timeout < 0:
        print("Config warning: lm_studio timeout must be a non-negative integer, using 0 (unlimited)", file=sys.stderr)
        config.lm_studio.timeout = 0

    if not isinstance(config.ollama.keep_alive, str):
        config.ollama.keep_alive = str(config.ollama.keep_alive)

    for name in ("color", "show_diff", "auto_copy"):
        if not isinstance(getattr(config.ui, name), bool):
            print(f"Config warning: ui {name} must be true or false, using default", file=sys.stderr)
            setattr(config.ui, name, getattr(UIConfig(), name))


# Global config instance with thread-safe initialization
_config: Optional[Config] = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Get the global configuration instance (thread-safe)."""
    global _config
    if _config is None:
        with _config_lock:
            # Double-check locking pattern for thread safety
            if _config is None:
                _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config
    with _config_lock:
        _config = None


# ---------------------------------------------------------------------------
# TOML section helpers
# ---------------------------------------------------------------------------

def _replace_in_section(content: str, section: str, key: str, new_value: str) -> str:
    """Replace a key's value within a specific TOML section.

    new_value must already be serialized to its TOML string representation
    (e.g. '"quoted"' for strings, 'true'/'false' for bools, '42' for ints).
    If the key doesn't exist in the section, it is appended under the header.
    """
    lines = content.splitlines(keepends=True)
    in_section = False
    section_header_idx = None
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("[") and stripped.endswith("]"):
            in_section = stripped == f"[{section}]"
            if in_section:
                section_header_idx = i
            continue
        if in_section and not stripped.startswith("#"):
            repl = lambda m: m.group(1) + new_value  # noqa: E731
            for pattern in (
                rf'^(\s*{key}\s*=\s*)"[^"]*"',
                rf'^(\s*{key}\s*=\s*)(true|false)',
                rf'^(\s*{key}\s*=\s*)[-+]?[0-9]*\.?[0-9]+',
            ):
                new_line = re.sub(pattern, repl, line)
                if new_line != line:
                    lines[i] = new_line
                    return "".join(lines)

    # Key not found in section - append it after the section header
    if section_header_idx is not None:
        lines.insert(section_header_idx + 1, f"{key} = {new_value}\n")
        return "".join(lines)

    # Section not found at all - append a new section at the end of the file
    lines.append(f"\n[{section}]\n")
    lines.append(f"{key} = {new_value}\n")
    return "".join(lines)


def _serialize_toml_value(value) -> str:
    """Serialize a Python value to its TOML string representation."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    # String: escape backslashes and quotes, wrap in double quotes
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def update_config_field(section: str, key: str, value) -> bool:
    """Update a single config field in-memory AND persist to TOML.

    value may be a bool, int, float, or str. Serialization is handled
    automatically so callers pass Python-native values directly.
    """
    config = get_config()
    section_obj = getattr(config, section, None)
    if section_obj is not None and hasattr(section_obj, key):
        with _config_lock:
            setattr(section_obj, key, value)
    try:
        fd = os.open(str(CONFIG_FILE), os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            content = CONFIG_FILE.read_text()
            content = _replace_in_section(content, section, key, _serialize_toml_value(value))
            CONFIG_FILE.write_text(content)
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)
        return True
    except Exception as e:
        print(f"Config write failed: {e}", file=sys.stderr)
        return False
