"""Tests for channel_login.py."""

from channel_login import main


class TestUsage:
    """Tests for argument dispatch."""

    def test_unknown_channel_prints_usage(self, fake_docker, capsys):
        """Unrecognised channels fail before any docker call."""
        runner = fake_docker()

        assert main(['signal'], runner) == 1

        out = capsys.readouterr().out
        assert out.startswith('Usage: openclaw-channel-login [channel]')
        assert 'whatsapp, wa' in out
        assert runner.calls == []


class TestTokenChannels:
    """Tests for Telegram, Discord and Slack instructions."""

    def test_telegram_prints_instructions(self, fake_docker, capsys):
        runner = fake_docker(env={'TELEGRAM_BOT_TOKEN': '123:abc'})

        assert main(['telegram'], runner) == 0

        out = capsys.readouterr().out
        assert 'Message @BotFather on Telegram' in out
        assert 'Set TELEGRAM_BOT_TOKEN in your Coolify environment variables' in out
        assert '✓ TELEGRAM_BOT_TOKEN is configured' in out
        assert 'Done!' in out

    def test_telegram_alias(self, fake_docker, capsys):
        assert main(['tg'], fake_docker()) == 0

        out = capsys.readouterr().out
        assert 'Telegram Configuration' in out
        assert '✗ TELEGRAM_BOT_TOKEN is not set' in out

    def test_instructions_without_running_container(self, fake_docker, capsys):
        """Instructions never depend on the container being up."""
        runner = fake_docker(running=())

        assert main(['discord'], runner) == 0

        out = capsys.readouterr().out
        assert 'https://discord.com/developers/applications' in out
        assert 'permissions=277025508416' in out
        assert 'cannot check variables' in out
        assert runner.exec_calls() == []

    def test_slack_checks_both_tokens(self, fake_docker, capsys):
        runner = fake_docker(env={'SLACK_BOT_TOKEN': 'xoxb-1'})

        assert main(['slack'], runner) == 0

        out = capsys.readouterr().out
        assert 'Set SLACK_BOT_TOKEN and SLACK_APP_TOKEN in Coolify' in out
        assert '✓ SLACK_BOT_TOKEN is configured' in out
        assert '✗ SLACK_APP_TOKEN is not set' in out


class TestWhatsApp:
    """Tests for the interactive WhatsApp login."""

    def test_default_channel_is_whatsapp(self, fake_docker, capsys):
        runner = fake_docker()

        assert main([], runner) == 0

        assert runner.exec_calls() == [['node', 'dist/index.js', 'channels', 'login']]
        assert ['docker', 'exec', '-it', 'openclaw-gateway', 'node', 'dist/index.js', 'channels', 'login'] in runner.calls
        assert 'Linked Devices' in capsys.readouterr().out

    def test_falls_back_to_cli_alias(self, fake_docker):
        runner = fake_docker(failing=[['node']])

        assert main(['wa'], runner) == 0

        assert runner.exec_calls() == [
            ['node', 'dist/index.js', 'channels', 'login'],
            ['openclaw', 'channels', 'login'],
        ]

    def test_requires_running_container(self, fake_docker, capsys):
        runner = fake_docker(running=('openclaw-redis',))

        assert main(['whatsapp'], runner) == 1

        assert 'openclaw-gateway is not running' in capsys.readouterr().out
        assert runner.exec_calls() == []

    def test_container_name_from_environment(self, fake_docker, monkeypatch):
        monkeypatch.setenv('OPENCLAW_CONTAINER', 'claw')
        runner = fake_docker(running=('claw',))

        assert main(['whatsapp'], runner) == 0
        assert runner.calls[-1][:4] == ['docker', 'exec', '-it', 'claw']


class TestStatus:
    """Tests for the status/all mode."""

    def test_status_prints_cli_output(self, fake_docker, capsys):
        runner = fake_docker()

        assert main(['all'], runner) == 0

        assert runner.exec_calls() == [['node', 'dist/index.js', 'status']]
        out = capsys.readouterr().out
        assert 'Channel Status' in out
        assert 'ok' in out

    def test_status_failure_is_reported(self, fake_docker, capsys):
        runner = fake_docker(failing=[['node'], ['openclaw']])

        assert main(['status'], runner) == 1
        assert 'Could not get channel status' in capsys.readouterr().out
