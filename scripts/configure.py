#!/usr/bin/env python3
"""
OpenClaw configuration synthesizer

Reads the container environment and writes openclaw.json:
  - agent model chosen from whichever provider credential is present
  - gateway bind/port/token auth and trusted proxies
  - channels: WhatsApp always, Telegram/Discord/Slack when their tokens are set
  - browser automation endpoint

The environment is authoritative: the document is regenerated on every start.
Only the gateway token is carried over from a previous document, so the
Control UI login survives restarts.

Usage:
    python scripts/configure.py
"""

import json
import os
import secrets
import sys
import tempfile
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import ValidationError

from models import (
    AgentDefaults,
    AgentSection,
    AgentsSection,
    BrowserSection,
    ChannelsSection,
    DiscordChannel,
    GatewayAuth,
    GatewayEnv,
    GatewaySection,
    OpenClawConfig,
    SlackChannel,
    TelegramChannel,
)

FALLBACK_MODEL = 'anthropic/claude-sonnet-4-5'

# First provider with a credential decides the default model
MODEL_PRIORITY = [
    (('anthropic_api_key', 'claude_code_oauth_token'), 'anthropic/claude-sonnet-4-5'),
    (('gemini_api_key',), 'google/gemini-3-pro-preview'),
    (('openai_api_key',), 'openai/gpt-4o'),
    (('openrouter_api_key',), 'openrouter/anthropic/claude-sonnet-4'),
]

TOKEN_BYTES = 32


class ConfigError(ValueError):
    """Raised for inputs the synthesizer cannot turn into a document."""


def generate_token() -> str:
    """Random gateway token: 32 bytes as 64 hex characters."""
    return secrets.token_hex(TOKEN_BYTES)


def read_existing_token(config_path: Path) -> Optional[str]:
    """Return gateway.auth.token from a previous openclaw.json, if any."""
    if not config_path.exists():
        return None
    try:
        document = json.loads(config_path.read_text(encoding='utf-8'))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        print(f"WARNING: Ignoring unreadable config {config_path}: {e}")
        return None
    token = document
    for key in ('gateway', 'auth', 'token'):
        if not isinstance(token, dict):
            return None
        token = token.get(key)
    if isinstance(token, str) and token.strip():
        return token.strip()
    return None


def resolve_gateway_token(env_token: str, config_path: Path) -> str:
    """Explicit token, then the token of the previous document, then a new one."""
    if env_token:
        return env_token
    token = read_existing_token(config_path)
    if token:
        print(f"Reusing gateway token from {config_path}")
        return token
    token = generate_token()
    print(f"Generated new gateway token: {token}")
    return token


def select_default_model(env: GatewayEnv) -> str:
    for fields, model in MODEL_PRIORITY:
        if any(getattr(env, field) for field in fields):
            return model
    return FALLBACK_MODEL


def parse_trusted_proxies(value: str) -> list[str]:
    """Convert a comma-separated proxy list into an ordered list of entries."""
    return [item.strip() for item in value.split(',') if item.strip()]


def build_channels(env: GatewayEnv) -> ChannelsSection:
    channels = ChannelsSection()

    if env.telegram_bot_token:
        channels.telegram = TelegramChannel(bot_token=env.telegram_bot_token)
        print("Configured Telegram channel")

    if env.discord_bot_token:
        channels.discord = DiscordChannel(token=env.discord_bot_token)
        print("Configured Discord channel")

    if env.slack_bot_token and env.slack_app_token:
        channels.slack = SlackChannel(
            bot_token=env.slack_bot_token,
            app_token=env.slack_app_token,
        )
        print("Configured Slack channel")
    elif env.slack_bot_token or env.slack_app_token:
        print("WARNING: Slack needs both SLACK_BOT_TOKEN and SLACK_APP_TOKEN; skipping Slack")

    return channels


def build_config(env: GatewayEnv, token: str, model: str) -> OpenClawConfig:
    """Assemble the configuration document from validated inputs."""
    return OpenClawConfig(
        agent=AgentSection(model=model, workspace=env.workspace_dir),
        gateway=GatewaySection(
            bind=env.gateway_bind,
            port=env.gateway_port,
            auth=GatewayAuth(token=token),
            trusted_proxies=parse_trusted_proxies(env.trusted_proxies),
        ),
        channels=build_channels(env),
        browser=BrowserSection(enabled=env.browser_enabled, control_url=env.browser_url),
        agents=AgentsSection(defaults=AgentDefaults(workspace=env.workspace_dir)),
    )


def deep_merge(base: dict, overrides: Mapping) -> dict:
    """Merge overrides into a copy of base; nested mappings merge, anything else replaces."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_overrides(path: Optional[Path]) -> dict:
    """Load the optional YAML overrides file (an empty file means no overrides)."""
    if path is None:
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8'))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config overrides {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config overrides {path} must be a mapping, got {type(data).__name__}")
    return data


def document_token(document: Mapping) -> str:
    """Return gateway.auth.token from a finished document.

    Raises:
        ConfigError: If the token is missing or empty
    """
    token = document
    for key in ('gateway', 'auth', 'token'):
        if not isinstance(token, Mapping):
            token = None
            break
        token = token.get(key)
    if not isinstance(token, str) or not token.strip():
        raise ConfigError("gateway.auth.token must be a non-empty string after applying overrides")
    return token


def write_atomic(path: Path, content: str, mode: int = 0o600) -> None:
    """Write a file via temp file + rename so readers never see a partial file.

    The temp file is created with the final mode before any content is written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name + '.', suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            os.fchmod(f.fileno(), mode)
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def write_config(document: dict, path: Path) -> None:
    write_atomic(path, json.dumps(document, indent=2) + '\n')


def synthesize_config(env: GatewayEnv) -> dict:
    """Build and write openclaw.json, exporting the resolved gateway token.

    Returns:
        The document as written.

    Raises:
        ConfigError: If the overrides file is unusable or drops the token
        pydantic.ValidationError: If the assembled document is invalid
    """
    config_path = env.config_path
    if config_path.exists():
        print(f"Regenerating {config_path} from environment")
    else:
        print("No existing config found, creating new configuration")

    token = resolve_gateway_token(env.gateway_token, config_path)

    trusted = parse_trusted_proxies(env.trusted_proxies)
    print(f"Trusted proxies: {json.dumps(trusted)}")

    model = select_default_model(env)
    print(f"Default model: {model}")

    print("Generating OpenClaw configuration...")
    document = build_config(env, token, model).to_document()

    overrides = load_overrides(env.overrides_file)
    if overrides:
        document = deep_merge(document, overrides)
        print(f"Applied overrides from {env.overrides_file}")

    os.environ['OPENCLAW_GATEWAY_TOKEN'] = document_token(document)

    write_config(document, config_path)
    print(f"Config written to {config_path}")
    return document


def print_validation_errors(error: ValidationError) -> None:
    print("Configuration validation: FAILED")
    print("  " + "-" * 50)
    for item in error.errors():
        loc = ' -> '.join(str(x) for x in item['loc'])
        print(f"  {loc}: {item['msg']}")
    print("  " + "-" * 50)


def main() -> None:
    try:
        env = GatewayEnv.from_environ(os.environ)
        synthesize_config(env)
    except ValidationError as e:
        print_validation_errors(e)
        sys.exit(1)
    except (ConfigError, OSError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
