#!/usr/bin/env python3
"""
Auth material writer for the OpenClaw gateway.

Mirrors provider credentials from the environment into the places OpenClaw
looks for them:
  {state}/.env and {app}/.env: KEY=VALUE lines for API keys
  {state}/agents/main/agent/auth-profiles.json: one profile per API key

A Claude setup-token (CLAUDE_CODE_OAUTH_TOKEN) is handed to OpenClaw's own
`models auth paste-token` command, which owns the on-disk shape of OAuth
credentials. Nothing here blocks startup: a failed import is a warning.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from configure import print_validation_errors, write_atomic
from models import AuthProfile, GatewayEnv, dump_auth_profiles
from openclaw_cli import Runner, openclaw_commands, render, run_first_success

# (env var, GatewayEnv field, profile id, provider, log label)
API_KEY_PROVIDERS = [
    ('ANTHROPIC_API_KEY', 'anthropic_api_key', 'anthropic:api', 'anthropic', 'Anthropic API key'),
    ('OPENAI_API_KEY', 'openai_api_key', 'openai:api', 'openai', 'OpenAI API key'),
    ('OPENROUTER_API_KEY', 'openrouter_api_key', 'openrouter:api', 'openrouter', 'OpenRouter API key'),
    ('GEMINI_API_KEY', 'gemini_api_key', 'google:api', 'google', 'Gemini API key'),
]

SUPPORTED_CREDENTIALS = [
    ('CLAUDE_CODE_OAUTH_TOKEN', "for Claude Pro (run 'claude setup-token')"),
    ('ANTHROPIC_API_KEY', 'get from https://console.anthropic.com/settings/keys'),
    ('GEMINI_API_KEY', 'get from https://aistudio.google.com/apikey'),
    ('OPENAI_API_KEY', 'get from https://platform.openai.com/api-keys'),
    ('OPENROUTER_API_KEY', 'get from https://openrouter.ai/keys'),
]

PASTE_TOKEN_ARGS = ('models', 'auth', 'paste-token', '--provider', 'anthropic')
PASTE_TOKEN_TIMEOUT = 60


def build_auth_profiles(env: GatewayEnv) -> dict[str, AuthProfile]:
    profiles = {}
    for _, field, profile_id, provider, label in API_KEY_PROVIDERS:
        value = getattr(env, field)
        if value:
            profiles[profile_id] = AuthProfile(provider=provider, mode='api_key', api_key=value)
            print(f"Added {label}")
    return profiles


def render_env_lines(env: GatewayEnv) -> str:
    """KEY=VALUE lines for each API key that is set."""
    lines = [
        f"{name}={getattr(env, field)}"
        for name, field, _, _, _ in API_KEY_PROVIDERS
        if getattr(env, field)
    ]
    return ''.join(line + '\n' for line in lines)


def write_env_files(env: GatewayEnv, paths: Iterable[Path]) -> None:
    content = render_env_lines(env)
    for path in paths:
        write_atomic(path, content)


def write_auth_profiles(profiles: dict[str, AuthProfile], path: Path) -> None:
    write_atomic(path, json.dumps(dump_auth_profiles(profiles), indent=2) + '\n')


def import_setup_token(token: str, app_dir: Path, runner: Runner = subprocess.run) -> bool:
    """Hand a Claude setup-token to `openclaw models auth paste-token`.

    Returns:
        True if the import succeeded. Failures and timeouts only print a warning.
    """
    try:
        result = run_first_success(
            openclaw_commands(*PASTE_TOKEN_ARGS),
            runner,
            input=token + '\n',
            capture_output=True,
            text=True,
            cwd=str(app_dir),
            timeout=PASTE_TOKEN_TIMEOUT,
        )
    except subprocess.TimeoutExpired as e:
        result = None
        detail = f"paste-token timed out after {e.timeout}s"
    else:
        detail = ''
        if result is not None and result.returncode == 0:
            print("Imported Anthropic setup-token (CLAUDE_CODE_OAUTH_TOKEN)")
            return True

    if result is not None:
        detail = (result.stderr or result.stdout or '').strip()
    print("WARNING: Failed to import CLAUDE_CODE_OAUTH_TOKEN; continuing startup")
    if detail:
        print(f"  {detail}")
    return False


def has_any_credential(env: GatewayEnv) -> bool:
    return bool(env.claude_code_oauth_token) or any(
        getattr(env, field) for _, field, _, _, _ in API_KEY_PROVIDERS
    )


def no_credentials_warning() -> str:
    return render('no_credentials.txt.j2', providers=SUPPORTED_CREDENTIALS)


def write_auth_material(env: GatewayEnv, runner: Runner = subprocess.run) -> dict[str, AuthProfile]:
    """Write .env files and auth profiles, then import the setup-token if present.

    Profiles are written first so paste-token merges into a fresh file.
    """
    print("Building auth profiles...")
    profiles = build_auth_profiles(env)

    write_env_files(env, env.env_file_paths)
    write_auth_profiles(profiles, env.auth_profiles_path)
    print(f"Auth profiles written to {env.auth_profiles_path}")

    if env.claude_code_oauth_token:
        import_setup_token(env.claude_code_oauth_token, env.app_dir, runner)

    if not has_any_credential(env):
        print(no_credentials_warning(), end='')

    return profiles


def main() -> None:
    try:
        env = GatewayEnv.from_environ(os.environ)
        write_auth_material(env)
    except ValidationError as e:
        print_validation_errors(e)
        sys.exit(1)
    except OSError as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
