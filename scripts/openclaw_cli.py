#!/usr/bin/env python3
"""
Shared plumbing for talking to the OpenClaw CLI and the gateway container.

The OpenClaw image ships two ways to run its CLI: the compiled entrypoint
(`node dist/index.js`, relative to /app) and an installed `openclaw` alias.
Helpers try them in that order.
"""

import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence

from jinja2 import FileSystemLoader, StrictUndefined
from jinja2.sandbox import SandboxedEnvironment

TEMPLATES_DIR = Path(__file__).parent / 'templates'

COMPILED_ENTRYPOINT = ['node', 'dist/index.js']
CLI_ALIAS = ['openclaw']

HEALTH_URL = 'http://localhost:18789/health'

# ANSI colours for operator-facing output
RED = '\033[0;31m'
GREEN = '\033[0;32m'
YELLOW = '\033[1;33m'
BLUE = '\033[0;34m'
NC = '\033[0m'

Runner = Callable[..., subprocess.CompletedProcess]


def openclaw_commands(*args: str) -> list[list[str]]:
    """Candidate invocations of an OpenClaw subcommand, preferred first."""
    return [COMPILED_ENTRYPOINT + list(args), CLI_ALIAS + list(args)]


def run_first_success(
    candidates: Sequence[Sequence[str]],
    runner: Runner = subprocess.run,
    **kwargs,
) -> Optional[subprocess.CompletedProcess]:
    """Run each candidate command until one exits 0.

    A candidate whose executable is missing counts as a failure.

    Returns:
        The first successful CompletedProcess, otherwise the last completed
        one (None if no candidate could be started at all).
    """
    last = None
    for command in candidates:
        try:
            result = runner(list(command), **kwargs)
        except OSError:
            continue
        if result.returncode == 0:
            return result
        last = result
    return last


class DockerExec:
    """Run commands inside a named container via the docker CLI."""

    def __init__(self, container: str, runner: Runner = subprocess.run):
        self.container = container
        self.runner = runner

    def available(self) -> bool:
        """True when the docker daemon is reachable by this user."""
        try:
            result = self.runner(['docker', 'ps'], capture_output=True, text=True)
        except FileNotFoundError:
            return False
        return result.returncode == 0

    def is_running(self, name: Optional[str] = None) -> bool:
        name = name or self.container
        try:
            result = self.runner(
                ['docker', 'ps', '--format', '{{.Names}}'],
                capture_output=True, text=True,
            )
        except FileNotFoundError:
            return False
        if result.returncode != 0:
            return False
        return name in result.stdout.split()

    def command(self, args: Sequence[str], interactive: bool = False) -> list[str]:
        prefix = ['docker', 'exec']
        if interactive:
            prefix.append('-it')
        return prefix + [self.container] + list(args)

    def run(self, args: Sequence[str], interactive: bool = False, quiet: bool = False) -> subprocess.CompletedProcess:
        kwargs = {'capture_output': True, 'text': True} if quiet else {}
        return self.runner(self.command(args, interactive), **kwargs)

    def run_openclaw(self, *args: str, interactive: bool = False, quiet: bool = False) -> bool:
        """Run an OpenClaw subcommand in the container, falling back to the CLI alias."""
        candidates = [self.command(c, interactive) for c in openclaw_commands(*args)]
        kwargs = {'capture_output': True, 'text': True} if quiet else {}
        result = run_first_success(candidates, self.runner, **kwargs)
        if result is not None and quiet and result.returncode == 0 and result.stdout:
            print(result.stdout, end='')
        return result is not None and result.returncode == 0

    def has_env(self, name: str) -> bool:
        """True when the variable is set to a non-empty value inside the container."""
        result = self.run(['printenv', name], quiet=True)
        return result.returncode == 0 and bool(result.stdout.strip())

    def healthy(self, url: str = HEALTH_URL) -> bool:
        result = self.run(['curl', '-sf', url], quiet=True)
        return result.returncode == 0


def render(template_name: str, **context) -> str:
    """Render an instruction template from scripts/templates."""
    env = SandboxedEnvironment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    return env.get_template(template_name).render(**context)


def print_msg(message: str, color: str = '') -> None:
    print(f"{color}{message}{NC}" if color else message)


def print_header(title: str) -> None:
    print("")
    print_msg("=" * 65, BLUE)
    print_msg(f"  {title}", BLUE)
    print_msg("=" * 65, BLUE)
    print("")


def print_success(message: str) -> None:
    print_msg(f"✓ {message}", GREEN)


def print_warning(message: str) -> None:
    print_msg(f"⚠ {message}", YELLOW)


def print_error(message: str) -> None:
    print_msg(f"✗ {message}", RED)
