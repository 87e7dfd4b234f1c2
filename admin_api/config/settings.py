"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path


DEMO_SECRET_KEY = "sk_test_demo"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    # Priority 1: Read from /run/secrets
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read /run/secrets/{secret_name}: {e}")

    # Priority 2: Fallback to environment variable
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Clerk Backend API
    clerk_secret_key: str
    clerk_api_url: str = "https://api.clerk.com/v1"
    request_timeout: float = 10.0

    # Directory scanning
    page_size: int = 100
    max_page_size: int = 500
    max_scan_offset: int = 10000
    list_default_limit: int = 50

    # Login
    login_search_budget: float = 10.0
    login_verify_timeout: float = 5.0
    login_verify_workers: int = 8
    distinguish_search_timeout: bool = False

    # Facade authentication (empty = disabled)
    admin_api_token: str = ""

    # Logging
    log_level: str = "INFO"
    log_request_bodies: bool = False

    @property
    def scan_page_size(self) -> int:
        """Page size used by the directory scanner, clamped to the provider cap."""
        return max(1, min(self.page_size, self.max_page_size))


def _env_bool(var_name: str, default: bool) -> bool:
    return os.environ.get(var_name, str(default)).strip().lower() == "true"


def _env_int(var_name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be an integer (got {raw!r}).")
    if value < minimum:
        raise RuntimeError(f"Environment variable {var_name} must be >= {minimum} (got {value}).")
    return value


def _env_float(var_name: str, default: float) -> float:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {var_name} must be a number (got {raw!r}).")
    if value <= 0:
        raise RuntimeError(f"Environment variable {var_name} must be positive (got {value}).")
    return value


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = _env_bool("DEMO_MODE", False)

    # ─────────────────────────────────────────────────────────────────────────
    # Secrets: /run/secrets > environment variables > demo defaults
    # ─────────────────────────────────────────────────────────────────────────
    clerk_secret_key = _load_secret_from_file("clerk_secret_key", "CLERK_SECRET_KEY")
    if not clerk_secret_key:
        if demo_mode:
            clerk_secret_key = DEMO_SECRET_KEY
            print("[demo-mode] Using placeholder CLERK_SECRET_KEY (provider calls will be rejected)")
        else:
            raise RuntimeError("CLERK_SECRET_KEY not found in /run/secrets or environment")

    admin_api_token = _load_secret_from_file("admin_api_token", "ADMIN_API_TOKEN") or ""

    clerk_api_url = os.environ.get("CLERK_API_URL", "").strip() or "https://api.clerk.com/v1"

    page_size = _env_int("CLERK_PAGE_SIZE", 100)
    max_page_size = _env_int("CLERK_MAX_PAGE_SIZE", 500)
    if page_size > max_page_size:
        print(f"[settings] WARNING: CLERK_PAGE_SIZE={page_size} exceeds CLERK_MAX_PAGE_SIZE={max_page_size}; clamping")

    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise RuntimeError(f"Environment variable LOG_LEVEL must be a logging level name (got {log_level!r}).")

    cfg = AppConfig(
        demo_mode=demo_mode,
        clerk_secret_key=clerk_secret_key,
        clerk_api_url=clerk_api_url.rstrip("/"),
        request_timeout=_env_float("CLERK_REQUEST_TIMEOUT", 10.0),
        page_size=page_size,
        max_page_size=max_page_size,
        max_scan_offset=_env_int("DIRECTORY_MAX_OFFSET", 10000),
        list_default_limit=_env_int("USER_LIST_DEFAULT_LIMIT", 50),
        login_search_budget=_env_float("LOGIN_SEARCH_BUDGET_SECONDS", 10.0),
        login_verify_timeout=_env_float("LOGIN_VERIFY_TIMEOUT_SECONDS", 5.0),
        login_verify_workers=_env_int("LOGIN_VERIFY_WORKERS", 8),
        distinguish_search_timeout=_env_bool("LOGIN_DISTINGUISH_SEARCH_TIMEOUT", False),
        admin_api_token=admin_api_token,
        log_level=log_level,
        log_request_bodies=_env_bool("LOG_REQUEST_BODIES", demo_mode),
    )

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(
        f"[settings] Mode={mode_label}; api={cfg.clerk_api_url}; "
        f"page_size={cfg.scan_page_size}; max_offset={cfg.max_scan_offset}"
    )

    if demo_mode:
        print("[settings] WARNING: Demo defaults in use. Do not deploy with these defaults.")

    return cfg
