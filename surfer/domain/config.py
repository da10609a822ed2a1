from dataclasses import dataclass, field

DEFAULT_USER_AGENT = "Surfer/1.0 (+https://pypi.org/project/surfer-browser/)"


@dataclass(frozen=True)
class BrowserConfig:
    """Session defaults applied when a browser is created."""
    user_agent: str = DEFAULT_USER_AGENT
    send_referer: bool = True
    meta_refresh_handling: bool = True
    follow_redirects: bool = True
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = 30.0  # seconds, per transport request
    max_redirects: int = 30
    username: str | None = None
    password: str | None = None

    def __post_init__(self):
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got: {self.timeout}")
        if self.max_redirects < 0:
            raise ValueError(f"max_redirects must not be negative, got: {self.max_redirects}")

    @property
    def has_credentials(self) -> bool:
        return bool(self.username)


@dataclass(frozen=True)
class Config:
    """Main configuration containing log level and nested config objects."""
    log_level: str = "INFO"
    browser_config: BrowserConfig = field(default_factory=BrowserConfig)
