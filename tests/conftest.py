"""Shared fixtures for the deployment toolkit tests."""

import subprocess
import sys
from pathlib import Path

import pytest

# Add scripts directory to path for imports
SCRIPTS_DIR = Path(__file__).parent.parent / 'scripts'
sys.path.insert(0, str(SCRIPTS_DIR))

RECOGNISED_VARS = [
    'OPENCLAW_GATEWAY_TOKEN',
    'OPENCLAW_GATEWAY_BIND',
    'OPENCLAW_GATEWAY_PORT',
    'OPENCLAW_TRUSTED_PROXIES',
    'ANTHROPIC_API_KEY',
    'CLAUDE_CODE_OAUTH_TOKEN',
    'GEMINI_API_KEY',
    'OPENAI_API_KEY',
    'OPENROUTER_API_KEY',
    'TELEGRAM_BOT_TOKEN',
    'DISCORD_BOT_TOKEN',
    'SLACK_BOT_TOKEN',
    'SLACK_APP_TOKEN',
    'OPENCLAW_BROWSER_ENABLED',
    'OPENCLAW_BROWSER_URL',
    'OPENCLAW_STATE_DIR',
    'OPENCLAW_CONFIG_PATH',
    'OPENCLAW_WORKSPACE_DIR',
    'OPENCLAW_APP_DIR',
    'OPENCLAW_CONFIG_OVERRIDES',
    'OPENCLAW_CONTAINER',
    'OPENCLAW_ENV_FILE',
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate tests from credentials set in the developer's shell."""
    for name in RECOGNISED_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def layout(tmp_path):
    """State and app directories under tmp_path, as environment entries."""
    state_dir = tmp_path / 'state'
    app_dir = tmp_path / 'app'
    app_dir.mkdir()
    return {
        'OPENCLAW_STATE_DIR': str(state_dir),
        'OPENCLAW_APP_DIR': str(app_dir),
    }


class FakeDockerRunner:
    """Stands in for subprocess.run when helpers shell out to docker.

    Args:
        running: Container names reported by `docker ps`.
        env: Variables visible to `printenv` inside the container.
        failing: Command prefixes (after `docker exec [-it] <container>`)
            that exit 1.
        docker_ok: Whether `docker ps` succeeds at all.
    """

    def __init__(self, running=('openclaw-gateway',), env=None, failing=(), docker_ok=True):
        self.running = list(running)
        self.env = dict(env or {})
        self.failing = [list(prefix) for prefix in failing]
        self.docker_ok = docker_ok
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        if cmd[:2] == ['docker', 'ps']:
            if not self.docker_ok:
                return subprocess.CompletedProcess(cmd, 1, stdout='', stderr='permission denied')
            stdout = ''.join(name + '\n' for name in self.running) if '--format' in cmd else ''
            return subprocess.CompletedProcess(cmd, 0, stdout=stdout, stderr='')

        if cmd[:2] == ['docker', 'exec']:
            args = [a for a in cmd[2:] if a != '-it'][1:]
            if args[0] == 'printenv':
                value = self.env.get(args[1], '')
                return subprocess.CompletedProcess(
                    cmd, 0 if value else 1, stdout=value + '\n' if value else '', stderr='',
                )
            for prefix in self.failing:
                if args[:len(prefix)] == prefix:
                    return subprocess.CompletedProcess(cmd, 1, stdout='', stderr='failed')
            return subprocess.CompletedProcess(cmd, 0, stdout='ok\n', stderr='')

        raise AssertionError(f"Unexpected command: {cmd}")

    def exec_calls(self):
        """Commands run inside containers, without the docker exec prefix."""
        return [
            [a for a in call[2:] if a != '-it'][1:]
            for call in self.calls
            if call[:2] == ['docker', 'exec']
        ]


@pytest.fixture
def fake_docker():
    return FakeDockerRunner
