#!/usr/bin/env python3
"""
OpenClaw gateway container entrypoint

Runs once per container start:
  1. Validate the environment (plus an optional OPENCLAW_ENV_FILE)
  2. Regenerate openclaw.json
  3. Write auth material (.env files, auth-profiles.json, setup-token import)
  4. Replace this process with `node dist/index.js gateway ...`

Usage:
    openclaw-entrypoint
"""

import os
import sys
from pathlib import Path
from typing import Mapping

from pydantic import ValidationError

from auth_profiles import write_auth_material
from configure import ConfigError, print_validation_errors, synthesize_config
from models import GatewayEnv
from openclaw_cli import COMPILED_ENTRYPOINT


def load_env_file(path: Path) -> dict[str, str]:
    """Load key=value pairs from a .env file.

    Ignores comments (#) and empty lines.
    Does not handle variable expansion.
    """
    env_vars = {}
    if not path.exists():
        return env_vars
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('export '):
            line = line[len('export '):]
        if '=' in line:
            key, _, value = line.partition('=')
            value = value.strip()
            # Strip surrounding quotes (single or double)
            if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
                value = value[1:-1]
            env_vars[key.strip()] = value
    return env_vars


def collect_environment(environ: Mapping[str, str]) -> dict[str, str]:
    """Process environment layered over the optional OPENCLAW_ENV_FILE."""
    merged = dict(environ)
    env_file = environ.get('OPENCLAW_ENV_FILE')
    if env_file:
        path = Path(env_file)
        if path.exists():
            file_vars = load_env_file(path)
            print(f"Loaded {len(file_vars)} variables from {path}")
            for key, value in file_vars.items():
                if not merged.get(key):
                    merged[key] = value
        else:
            print(f"WARNING: OPENCLAW_ENV_FILE {path} does not exist")
    return merged


def build_gateway_command(env: GatewayEnv) -> list[str]:
    return COMPILED_ENTRYPOINT + [
        'gateway',
        '--bind', env.gateway_bind,
        '--port', str(env.gateway_port),
        '--allow-unconfigured',
    ]


def launch(command: list[str], cwd: Path) -> None:
    """Replace the current process with the gateway; never returns on success."""
    print(f"Starting gateway: {' '.join(command)}")
    sys.stdout.flush()
    sys.stderr.flush()
    os.chdir(cwd)
    os.execvp(command[0], command)


def prepare(environ: Mapping[str, str]) -> GatewayEnv:
    """Everything before exec: validate, write config, write auth material."""
    env = GatewayEnv.from_environ(collect_environment(environ))
    env.state_dir.mkdir(parents=True, exist_ok=True)
    synthesize_config(env)
    write_auth_material(env)
    return env


def main() -> None:
    try:
        env = prepare(os.environ)
    except ValidationError as e:
        print_validation_errors(e)
        sys.exit(1)
    except (ConfigError, OSError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    launch(build_gateway_command(env), env.app_dir)


if __name__ == '__main__':
    main()
