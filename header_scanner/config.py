# header_scanner/config.py
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    timeout_seconds: float = 5.0
    max_attempts: int = 2
    probe_methods: List[str] = field(default_factory=lambda: ["TRACE", "OPTIONS", "HEAD", "DEBUG"])
    include_xss_protection: bool = False
    transport: str = "direct"  # direct / relay
    relay_url: str = "http://localhost:8000/relay"
    user_agent: str = "Security-Scanner/1.0"
    verify_tls: bool = False
    log_level: str = "INFO"
    allowed_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    oidc_token_url: Optional[str] = None
    oidc_client_id: Optional[str] = None
    oidc_client_secret: Optional[str] = None
    oidc_scope: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            timeout_seconds=float(os.getenv("SCANNER_TIMEOUT_SECONDS", "5.0")),
            max_attempts=int(os.getenv("SCANNER_MAX_ATTEMPTS", "2")),
            probe_methods=[m.upper() for m in _env_list("SCANNER_PROBE_METHODS", "TRACE,OPTIONS,HEAD,DEBUG")],
            include_xss_protection=_env_bool("SCANNER_INCLUDE_XSS_PROTECTION", False),
            transport=os.getenv("SCANNER_TRANSPORT", "direct").strip().lower(),
            relay_url=os.getenv("SCANNER_RELAY_URL", "http://localhost:8000/relay"),
            user_agent=os.getenv("SCANNER_USER_AGENT", "Security-Scanner/1.0"),
            verify_tls=_env_bool("SCANNER_VERIFY_TLS", False),
            log_level=os.getenv("SCANNER_LOG_LEVEL", "INFO").upper(),
            allowed_origins=_env_list("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"),
            oidc_token_url=os.getenv("OIDC_TOKEN_URL"),
            oidc_client_id=os.getenv("OIDC_CLIENT_ID"),
            oidc_client_secret=os.getenv("OIDC_CLIENT_SECRET"),
            oidc_scope=os.getenv("OIDC_SCOPE"),
        )

    @property
    def oidc_configured(self) -> bool:
        return bool(self.oidc_token_url and self.oidc_client_id and self.oidc_client_secret)


settings = Settings.from_env()
