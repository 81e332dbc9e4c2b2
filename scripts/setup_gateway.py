#!/usr/bin/env python3
"""
OpenClaw Coolify setup helper

Run on the Coolify server after the first deployment. Checks that the
gateway, Redis and browser containers are up, runs `openclaw doctor` and
`openclaw status` inside the gateway, reports which channels have tokens and
offers to link WhatsApp.

Usage:
    openclaw-setup
"""

import argparse
import os
import subprocess
import sys
from typing import Callable, Optional, Sequence

from models import DEFAULT_CONTAINER
from openclaw_cli import (
    BLUE,
    YELLOW,
    DockerExec,
    Runner,
    print_error,
    print_header,
    print_msg,
    print_success,
    print_warning,
    render,
)

REDIS_CONTAINER = 'openclaw-redis'
BROWSER_CONTAINER = 'openclaw-browser'

TOKEN_CHANNELS = [
    ('Telegram', 'TELEGRAM_BOT_TOKEN'),
    ('Discord', 'DISCORD_BOT_TOKEN'),
    ('Slack', 'SLACK_BOT_TOKEN'),
]

DOCS_URL = 'https://docs.openclaw.ai'


def check_containers(docker: DockerExec) -> bool:
    print_header("Checking Container Status")

    all_running = True
    for name in (docker.container, REDIS_CONTAINER, BROWSER_CONTAINER):
        if docker.is_running(name):
            print_success(f"{name} is running")
        else:
            print_error(f"{name} is not running")
            all_running = False

    if not all_running:
        print_warning("Some containers are not running. Please check your deployment.")
    return all_running


def check_gateway_health(docker: DockerExec) -> bool:
    print_header("Checking Gateway Health")
    if docker.healthy():
        print_success("Gateway is healthy")
        return True
    print_warning("Gateway health check failed. It may still be starting up.")
    return False


def run_doctor(docker: DockerExec) -> None:
    print_header("Running OpenClaw Doctor")
    if not docker.run_openclaw('doctor', quiet=True):
        print_warning("Could not run doctor command")


def show_status(docker: DockerExec) -> None:
    print_header("OpenClaw Status")
    if not docker.run_openclaw('status', quiet=True):
        print_warning("Could not get status")


def show_channels(docker: DockerExec) -> None:
    print_header("Configured Channels")
    for label, variable in TOKEN_CHANNELS:
        if docker.has_env(variable):
            print_success(f"{label}: Configured")
        else:
            print_msg(f"{label}: Not configured", YELLOW)
    print_msg("WhatsApp: Requires QR scan (run openclaw-channel-login)", YELLOW)
    print_success("WebChat: Available at your domain")


def configure_whatsapp(docker: DockerExec, ask: Callable[[str], str] = input) -> None:
    print_header("WhatsApp Configuration")
    print("WhatsApp requires scanning a QR code to link your account.")
    print("")
    try:
        reply = ask("Do you want to configure WhatsApp now? (y/n): ")
    except EOFError:
        reply = ''

    if reply.strip().lower().startswith('y'):
        print("")
        print("Starting WhatsApp login... Scan the QR code with your phone.")
        print("(WhatsApp → Settings → Linked Devices → Link a Device)")
        print("")
        docker.run_openclaw('channels', 'login', interactive=True)
    else:
        print_msg("Skipping WhatsApp configuration. You can run this later with:", YELLOW)
        print(f"  docker exec -it {docker.container} openclaw channels login")


def show_next_steps(container: str) -> None:
    print_header("Next Steps")
    print(render('next_steps.txt.j2', container=container), end='')
    print_msg(f"Documentation: {DOCS_URL}", BLUE)


def main(
    argv: Optional[Sequence[str]] = None,
    runner: Runner = subprocess.run,
    ask: Callable[[str], str] = input,
) -> int:
    parser = argparse.ArgumentParser(
        prog='openclaw-setup',
        description='Post-deployment checks for an OpenClaw gateway on Coolify',
    )
    parser.parse_args(argv)

    container = os.environ.get('OPENCLAW_CONTAINER') or DEFAULT_CONTAINER
    docker = DockerExec(container, runner)

    print_header("OpenClaw Coolify Setup")

    if not docker.available():
        print_error("Cannot access Docker. Please run with sudo or add your user to the docker group.")
        return 1

    if check_containers(docker):
        check_gateway_health(docker)
        run_doctor(docker)
        show_status(docker)
        show_channels(docker)
        configure_whatsapp(docker, ask)

    show_next_steps(container)
    return 0


if __name__ == '__main__':
    sys.exit(main())
