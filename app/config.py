"""
Application configuration loaded from environment variables.
Uses pydantic-settings so every value can be overridden via a .env file.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Heroku Platform API ──────────────────────────────────────────────────
    heroku_api_url: str = "https://api.heroku.com"
    # API key (or OAuth token) sent as a Bearer credential
    heroku_api_key: str = ""
    heroku_timeout_seconds: float = 30.0

    # ── JWT ──────────────────────────────────────────────────────────────────
    # Secret used to sign/verify JWT tokens.  Change this in production!
    jwt_secret_key: str = "changeme-super-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60

    # ── API users ─────────────────────────────────────────────────────────────
    # Comma-separated "username:password" pairs.  Passwords may be given as
    # bcrypt hashes ($2b$...).
    api_users: str = "admin:secret"

    # ── AWS ──────────────────────────────────────────────────────────────────
    aws_region: str = "us-east-1"
    # Leave blank to use the default credential chain (IAM role, env vars, …)
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""

    # ── DynamoDB ─────────────────────────────────────────────────────────────
    dynamodb_table_name: str = "space_inbound_rules"
    # Set to a local DynamoDB endpoint for development (e.g. http://localhost:8000)
    dynamodb_endpoint_url: str = ""

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def get_api_users(self) -> dict[str, str]:
        """Return the configured user map {username: password}."""
        users: dict[str, str] = {}
        for pair in self.api_users.split(","):
            pair = pair.strip()
            if ":" in pair:
                username, password = pair.split(":", 1)
                users[username.strip()] = password.strip()
        return users


settings = Settings()
