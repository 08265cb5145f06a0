"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from permsync.core.frontegg.client import API_BASE_URL, REQUEST_TIMEOUT
from permsync.core.frontegg.permissions import PERMISSIONS_PATH

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = ".runtime/permission.json"


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
    
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("[settings] Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("[settings] Failed to read /run/secrets/%s: %s", secret_name, e)
    
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.info("[settings] Loaded %s from environment (fallback)", env_var)
            return secret_value
    
    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Frontegg API
    frontegg_api_url: str = API_BASE_URL
    frontegg_client_id: str = ""
    frontegg_secret_key: str = ""
    frontegg_api_token: str = ""
    request_timeout: float = REQUEST_TIMEOUT
    permissions_path: str = PERMISSIONS_PATH
    
    # Local state
    state_file: str = DEFAULT_STATE_FILE
    
    # Audit
    audit_log_signing_key: str = ""
    
    @property
    def secret_key_resolved(self) -> str:
        """Get the Frontegg vendor secret key with fallback.
        
        Priority:
        1. Configured value in frontegg_secret_key
        2. Docker secrets: /run/secrets/frontegg_secret_key
        3. Environment variable: FRONTEGG_SECRET_KEY
        
        Raises:
            ValueError: If the secret is not found
        """
        if self.frontegg_secret_key:
            return self.frontegg_secret_key
        
        secret = _load_secret_from_file("frontegg_secret_key", "FRONTEGG_SECRET_KEY")
        if secret:
            return secret
        
        raise ValueError(
            "FRONTEGG_SECRET_KEY not found. "
            "Provide it via Docker secrets or environment variable, or set FRONTEGG_API_TOKEN."
        )


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return float(REQUEST_TIMEOUT)
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(f"FRONTEGG_REQUEST_TIMEOUT must be a number of seconds, got '{raw}'")
    if value <= 0:
        raise RuntimeError("FRONTEGG_REQUEST_TIMEOUT must be positive.")
    return value


def load_settings() -> AppConfig:
    """Load settings from the environment and /run/secrets."""
    frontegg_api_url = os.environ.get("FRONTEGG_API_URL", API_BASE_URL).rstrip("/")
    frontegg_client_id = os.environ.get("FRONTEGG_CLIENT_ID", "")
    frontegg_secret_key = _load_secret_from_file("frontegg_secret_key", "FRONTEGG_SECRET_KEY") or ""
    frontegg_api_token = _load_secret_from_file("frontegg_api_token", "FRONTEGG_API_TOKEN") or ""
    request_timeout = _parse_timeout(os.environ.get("FRONTEGG_REQUEST_TIMEOUT"))
    permissions_path = os.environ.get("FRONTEGG_PERMISSIONS_PATH", PERMISSIONS_PATH)
    state_file = os.environ.get("PERMSYNC_STATE_FILE", DEFAULT_STATE_FILE)
    
    audit_log_signing_key = _load_secret_from_file("audit_log_signing_key", "AUDIT_LOG_SIGNING_KEY") or ""
    if audit_log_signing_key:
        os.environ["AUDIT_LOG_SIGNING_KEY"] = audit_log_signing_key
    
    auth_label = "token" if frontegg_api_token else ("vendor" if frontegg_client_id else "none")
    logger.info("[settings] api=%s; auth=%s; timeout=%ss", frontegg_api_url, auth_label, request_timeout)
    
    return AppConfig(
        frontegg_api_url=frontegg_api_url,
        frontegg_client_id=frontegg_client_id,
        frontegg_secret_key=frontegg_secret_key,
        frontegg_api_token=frontegg_api_token,
        request_timeout=request_timeout,
        permissions_path=permissions_path,
        state_file=state_file,
        audit_log_signing_key=audit_log_signing_key,
    )
