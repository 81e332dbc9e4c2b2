"""
Pydantic models for the gateway environment and the files it produces.

GatewayEnv validates the container environment before anything is written,
catching malformed values (ports, booleans) early with clear error messages.
OpenClawConfig and AuthProfile describe the documents handed to OpenClaw so
that credential values are serialised, never concatenated into JSON.
"""

from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_BIND = 'lan'
DEFAULT_PORT = 18789
DEFAULT_TRUSTED_PROXIES = 'loopback,linklocal,uniquelocal,10.0.0.0/8,172.16.0.0/12,192.168.0.0/16'
DEFAULT_BROWSER_URL = 'http://openclaw-browser:9222'
DEFAULT_STATE_DIR = '/data/.openclaw'
DEFAULT_WORKSPACE_DIR = '/data/openclaw'
DEFAULT_APP_DIR = '/app'
DEFAULT_CONTAINER = 'openclaw-gateway'


class GatewayEnv(BaseModel):
    """Environment inputs recognised by the entrypoint and helper scripts."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore', frozen=True)

    gateway_token: str = Field('', alias='OPENCLAW_GATEWAY_TOKEN')
    gateway_bind: str = Field(DEFAULT_BIND, alias='OPENCLAW_GATEWAY_BIND')
    gateway_port: int = Field(DEFAULT_PORT, ge=1, le=65535, alias='OPENCLAW_GATEWAY_PORT')
    trusted_proxies: str = Field(DEFAULT_TRUSTED_PROXIES, alias='OPENCLAW_TRUSTED_PROXIES')

    # Model providers
    anthropic_api_key: str = Field('', alias='ANTHROPIC_API_KEY')
    claude_code_oauth_token: str = Field('', alias='CLAUDE_CODE_OAUTH_TOKEN')
    gemini_api_key: str = Field('', alias='GEMINI_API_KEY')
    openai_api_key: str = Field('', alias='OPENAI_API_KEY')
    openrouter_api_key: str = Field('', alias='OPENROUTER_API_KEY')

    # Channels
    telegram_bot_token: str = Field('', alias='TELEGRAM_BOT_TOKEN')
    discord_bot_token: str = Field('', alias='DISCORD_BOT_TOKEN')
    slack_bot_token: str = Field('', alias='SLACK_BOT_TOKEN')
    slack_app_token: str = Field('', alias='SLACK_APP_TOKEN')

    browser_enabled: bool = Field(True, alias='OPENCLAW_BROWSER_ENABLED')
    browser_url: str = Field(DEFAULT_BROWSER_URL, alias='OPENCLAW_BROWSER_URL')

    # Filesystem layout
    state_dir: Path = Field(Path(DEFAULT_STATE_DIR), alias='OPENCLAW_STATE_DIR')
    config_file: Optional[Path] = Field(None, alias='OPENCLAW_CONFIG_PATH')
    workspace_dir: str = Field(DEFAULT_WORKSPACE_DIR, alias='OPENCLAW_WORKSPACE_DIR')
    app_dir: Path = Field(Path(DEFAULT_APP_DIR), alias='OPENCLAW_APP_DIR')
    overrides_file: Optional[Path] = Field(None, alias='OPENCLAW_CONFIG_OVERRIDES')

    container: str = Field(DEFAULT_CONTAINER, alias='OPENCLAW_CONTAINER')

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> 'GatewayEnv':
        """Validate an environment mapping; empty or blank values count as unset."""
        present = {key: value.strip() for key, value in environ.items() if value and value.strip()}
        return cls.model_validate(present)

    @field_validator('gateway_bind', 'browser_url', 'container')
    @classmethod
    def strip_value(cls, v: str) -> str:
        return v.strip()

    @property
    def config_path(self) -> Path:
        """Configuration document path (defaults to openclaw.json in the state dir)."""
        return self.config_file or self.state_dir / 'openclaw.json'

    @property
    def auth_dir(self) -> Path:
        return self.state_dir / 'agents' / 'main' / 'agent'

    @property
    def auth_profiles_path(self) -> Path:
        return self.auth_dir / 'auth-profiles.json'

    @property
    def env_file_paths(self) -> list[Path]:
        """Both .env lookup locations read by OpenClaw (state dir and cwd)."""
        return [self.state_dir / '.env', self.app_dir / '.env']


class CamelModel(BaseModel):
    """Base for documents serialised with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Configuration document (openclaw.json)
# ---------------------------------------------------------------------------

class AgentSection(CamelModel):
    model: str = Field(..., min_length=1)
    workspace: str


class GatewayAuth(CamelModel):
    mode: Literal['token'] = 'token'
    token: str = Field(..., min_length=1, description="Gateway token, never empty")


class ControlUi(CamelModel):
    allow_insecure_auth: bool = True


class GatewaySection(CamelModel):
    bind: str = DEFAULT_BIND
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)
    auth: GatewayAuth
    trusted_proxies: list[str] = Field(default_factory=list)
    control_ui: ControlUi = Field(default_factory=ControlUi)


class GroupPolicy(CamelModel):
    require_mention: bool = True


class DmPolicy(CamelModel):
    policy: str = 'pairing'


def _mention_groups() -> dict[str, GroupPolicy]:
    return {'*': GroupPolicy()}


class WhatsAppChannel(CamelModel):
    """Default channel; always enabled, linked later by QR scan."""
    enabled: bool = True
    allow_from: list[str] = Field(default_factory=list)
    groups: dict[str, GroupPolicy] = Field(default_factory=_mention_groups)


class TelegramChannel(CamelModel):
    enabled: bool = True
    bot_token: str = Field(..., min_length=1)
    groups: dict[str, GroupPolicy] = Field(default_factory=_mention_groups)


class DiscordChannel(CamelModel):
    enabled: bool = True
    token: str = Field(..., min_length=1)
    dm: DmPolicy = Field(default_factory=DmPolicy)


class SlackChannel(CamelModel):
    """Slack needs both a bot token (xoxb-) and a Socket Mode app token (xapp-)."""
    enabled: bool = True
    bot_token: str = Field(..., min_length=1)
    app_token: str = Field(..., min_length=1)
    dm: DmPolicy = Field(default_factory=DmPolicy)


class ChannelsSection(CamelModel):
    whatsapp: WhatsAppChannel = Field(default_factory=WhatsAppChannel)
    telegram: Optional[TelegramChannel] = None
    discord: Optional[DiscordChannel] = None
    slack: Optional[SlackChannel] = None


class BrowserSection(CamelModel):
    enabled: bool = True
    control_url: str = DEFAULT_BROWSER_URL


class AgentDefaults(CamelModel):
    workspace: str


class AgentsSection(CamelModel):
    defaults: AgentDefaults


class OpenClawConfig(CamelModel):
    """Root model for openclaw.json."""
    agent: AgentSection
    gateway: GatewaySection
    channels: ChannelsSection = Field(default_factory=ChannelsSection)
    browser: BrowserSection = Field(default_factory=BrowserSection)
    agents: AgentsSection

    def to_document(self) -> dict:
        """Plain dict with camelCase keys; channels that are not configured are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Auth profiles (agents/main/agent/auth-profiles.json)
# ---------------------------------------------------------------------------

class AuthProfile(CamelModel):
    provider: str = Field(..., min_length=1)
    mode: Literal['api_key', 'oauth'] = 'api_key'
    api_key: str = Field(..., min_length=1)


def dump_auth_profiles(profiles: Mapping[str, AuthProfile]) -> dict:
    """Serialise a profile-id -> AuthProfile mapping."""
    return {
        profile_id: profile.model_dump(by_alias=True)
        for profile_id, profile in profiles.items()
    }
