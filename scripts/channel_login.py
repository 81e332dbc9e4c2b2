#!/usr/bin/env python3
"""
OpenClaw channel login helper

Authenticates messaging channels that need an interactive login (WhatsApp QR
scan) and explains how to configure the token-based ones.

Usage:
    openclaw-channel-login [channel]
      channel: whatsapp (default), wa, telegram, tg, discord, slack, status, all
"""

import argparse
import os
import subprocess
import sys
from typing import Optional, Sequence

from models import DEFAULT_CONTAINER
from openclaw_cli import (
    GREEN,
    YELLOW,
    DockerExec,
    Runner,
    print_header,
    print_msg,
    render,
)

CHANNEL_ALIASES = {
    'whatsapp': 'whatsapp',
    'wa': 'whatsapp',
    'telegram': 'telegram',
    'tg': 'telegram',
    'discord': 'discord',
    'slack': 'slack',
    'status': 'status',
    'all': 'status',
}

# channel -> (header, instructions template, required variables)
TOKEN_CHANNELS = {
    'telegram': ('Telegram Configuration', 'telegram_setup.txt.j2', ['TELEGRAM_BOT_TOKEN']),
    'discord': ('Discord Configuration', 'discord_setup.txt.j2', ['DISCORD_BOT_TOKEN']),
    'slack': ('Slack Configuration', 'slack_setup.txt.j2', ['SLACK_BOT_TOKEN', 'SLACK_APP_TOKEN']),
}

USAGE_CHANNELS = """\
Channels:
  whatsapp, wa    - Login to WhatsApp (QR code)
  telegram, tg    - Show Telegram setup instructions
  discord         - Show Discord setup instructions
  slack           - Show Slack setup instructions
  status, all     - Show all channel status"""


def print_usage(prog: str) -> None:
    print(f"Usage: {prog} [channel]")
    print("")
    print(USAGE_CHANNELS)


def require_running(docker: DockerExec) -> bool:
    if docker.is_running():
        return True
    print_msg(f"Error: {docker.container} is not running.", YELLOW)
    print("Please ensure OpenClaw is deployed and running.")
    return False


def login_whatsapp(docker: DockerExec) -> int:
    if not require_running(docker):
        return 1
    print_header("WhatsApp Login")
    print(render('whatsapp_login.txt.j2'), end='')
    if not docker.run_openclaw('channels', 'login', interactive=True):
        print_msg("WhatsApp login did not complete.", YELLOW)
        return 1
    return 0


def show_token_channel(channel: str, docker: DockerExec) -> int:
    """Print setup instructions, then whether the container has the tokens."""
    title, template, variables = TOKEN_CHANNELS[channel]
    print_header(title)
    print(render(template, variables=variables), end='')

    print("Current status:")
    if not docker.is_running():
        print_msg(f"? {docker.container} is not running; cannot check variables", YELLOW)
        return 0
    for name in variables:
        if docker.has_env(name):
            print_msg(f"✓ {name} is configured", GREEN)
        else:
            print_msg(f"✗ {name} is not set", YELLOW)
    return 0


def show_status(docker: DockerExec) -> int:
    if not require_running(docker):
        return 1
    print_header("Channel Status")
    if not docker.run_openclaw('status', quiet=True):
        print_msg("Could not get channel status.", YELLOW)
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None, runner: Runner = subprocess.run) -> int:
    parser = argparse.ArgumentParser(
        prog='openclaw-channel-login',
        description='Log in to or inspect OpenClaw messaging channels',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=USAGE_CHANNELS,
    )
    parser.add_argument('channel', nargs='?', default='whatsapp')
    args = parser.parse_args(argv)

    channel = CHANNEL_ALIASES.get(args.channel.lower())
    if channel is None:
        print_usage(parser.prog)
        return 1

    container = os.environ.get('OPENCLAW_CONTAINER') or DEFAULT_CONTAINER
    docker = DockerExec(container, runner)

    if channel == 'whatsapp':
        code = login_whatsapp(docker)
    elif channel == 'status':
        code = show_status(docker)
    else:
        code = show_token_channel(channel, docker)

    if code == 0:
        print("")
        print_msg("Done!", GREEN)
    return code


if __name__ == '__main__':
    sys.exit(main())
