from pathlib import Path
from config.loader import get_config_loader

# Get the config loader instance
config = get_config_loader()

# Logging
LOG_LEVEL = config.get("LOG_LEVEL", "info")

# HTTP timeout for every call to the identity provider (seconds)
REQUEST_TIMEOUT = config.get("REQUEST_TIMEOUT", 30.0)

# Loopback redirect used by the CLI sign-in flow
CALLBACK_HOST = config.get("OIDC_CALLBACK_HOST", "localhost")
CALLBACK_PORT = config.get("OIDC_CALLBACK_PORT", 3000)
CALLBACK_PATH = config.get("OIDC_CALLBACK_PATH", "/callback")
REDIRECT_URI = config.get("OIDC_REDIRECT_URI", f"http://{CALLBACK_HOST}:{CALLBACK_PORT}{CALLBACK_PATH}")
POST_LOGOUT_REDIRECT_URI = config.get("OIDC_POST_LOGOUT_REDIRECT_URI", "")

# Callback wait timeout for --listen mode (seconds)
CALLBACK_TIMEOUT = config.get("OIDC_CALLBACK_TIMEOUT", 300)

# Token storage: durable ID/refresh tokens, and the sign-in session file
# standing in for per-browser-session storage between CLI invocations
TOKEN_FILE = config.get("OIDC_TOKEN_FILE", str(Path.home() / ".oidc-client" / "tokens.json"))
SESSION_FILE = config.get("OIDC_SESSION_FILE", str(Path.home() / ".oidc-client" / "sign_in_session.json"))
