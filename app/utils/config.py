"""
Configuration Management
Environment-based configuration for the application, database, Redis and email
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator
import logging

logger = logging.getLogger(__name__)


class AppConfig(BaseSettings):
    """Application Configuration"""

    # Service info
    service_name: str = "readit-service"
    service_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # GraphQL
    graphql_path: str = "/graphql"

    # Frontend used to build password reset links and for CORS
    frontend_url: str = "http://localhost:3000"
    cors_origins: List[str] = ["http://localhost:3000"]

    # Session cookie
    cookie_name: str = "qid"
    session_ttl_seconds: int = 60 * 60 * 24 * 7

    # Password hashing
    bcrypt_rounds: int = 12

    class Config:
        env_prefix = "APP_"
        case_sensitive = False

    @field_validator('frontend_url')
    @classmethod
    def validate_frontend_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError('Frontend URL must be an http(s) URL')
        return v.rstrip('/')

    @field_validator('session_ttl_seconds')
    @classmethod
    def validate_session_ttl(cls, v):
        if v < 1:
            raise ValueError('Session TTL must be at least 1 second')
        return v

    @field_validator('bcrypt_rounds')
    @classmethod
    def validate_bcrypt_rounds(cls, v):
        if not 4 <= v <= 31:
            raise ValueError('bcrypt rounds must be between 4 and 31')
        return v

    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment.lower() == "production"

    def log_config(self):
        """Log configuration (without sensitive data)"""
        logger.info(f"Service: {self.service_name} {self.service_version} ({self.environment})")
        logger.info(f"Frontend URL: {self.frontend_url}")
        logger.info(f"Session cookie: {self.cookie_name}, TTL {self.session_ttl_seconds}s")


class DatabaseConfig(BaseSettings):
    """Database Configuration"""

    # Full DSN takes precedence over the individual settings
    database_url: Optional[str] = None

    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "readit"
    postgres_user: str = "readit"
    postgres_password: str = "readit_secure_pass_change_me"

    # Pool settings
    pool_min_size: int = 5
    pool_max_size: int = 20
    command_timeout: float = 60.0

    class Config:
        env_prefix = ""
        case_sensitive = False

    @field_validator('postgres_port')
    @classmethod
    def validate_postgres_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError('Postgres port must be between 1 and 65535')
        return v

    def get_database_url(self) -> str:
        """Build database URL from individual settings"""
        if self.database_url:
            return self.database_url
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    def log_config(self):
        """Log configuration (without sensitive data)"""
        logger.info(f"Database Host: {self.postgres_host}:{self.postgres_port}")
        logger.info(f"Database: {self.postgres_db}")
        logger.info(f"Pool Size: {self.pool_min_size}-{self.pool_max_size}")


class RedisConfig(BaseSettings):
    """Redis Configuration"""

    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    # Sentinel (optional)
    redis_sentinel_enabled: bool = False
    redis_sentinel_hosts: str = "localhost"
    redis_sentinel_port: int = 26379
    redis_sentinel_master: str = "mymaster"

    socket_timeout: float = 5.0

    class Config:
        env_prefix = ""
        case_sensitive = False

    def get_sentinel_hosts(self):
        """Parse comma-separated sentinel hosts"""
        return [(h.strip(), self.redis_sentinel_port) for h in self.redis_sentinel_hosts.split(",") if h.strip()]

    def log_config(self):
        """Log configuration (without sensitive data)"""
        if self.redis_sentinel_enabled:
            logger.info(f"Redis Sentinel: {self.get_sentinel_hosts()}, master={self.redis_sentinel_master}")
        else:
            logger.info(f"Redis Host: {self.redis_host}:{self.redis_port}/{self.redis_db}")


class SMTPConfig(BaseSettings):
    """Email delivery configuration"""

    # "smtp" sends directly, "http" goes through the notification service
    notifier_backend: str = "smtp"
    notification_service_url: str = "http://notification-service:5000"

    # Core SMTP settings
    smtp_host: str = "mailhog"
    smtp_port: int = 1025
    smtp_use_tls: bool = False
    smtp_timeout: int = 30

    # Authentication (optional)
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None

    # Email defaults
    default_from_email: str = "noreply@readit.local"
    default_from_name: str = "ReadIt"

    class Config:
        env_prefix = ""
        case_sensitive = False

    @field_validator('notifier_backend')
    @classmethod
    def validate_notifier_backend(cls, v):
        v = v.lower()
        if v not in ("smtp", "http"):
            raise ValueError('Notifier backend must be "smtp" or "http"')
        return v

    @field_validator('smtp_port')
    @classmethod
    def validate_smtp_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError('SMTP port must be between 1 and 65535')
        return v

    @field_validator('smtp_timeout')
    @classmethod
    def validate_smtp_timeout(cls, v):
        if v < 1:
            raise ValueError('SMTP timeout must be at least 1 second')
        return v

    def log_config(self):
        """Log configuration (without sensitive data)"""
        logger.info(f"Notifier backend: {self.notifier_backend}")
        if self.notifier_backend == "smtp":
            logger.info(f"SMTP Host: {self.smtp_host}:{self.smtp_port}, TLS: {self.smtp_use_tls}")
            logger.info(f"Authentication: {'Yes' if self.smtp_username else 'No'}")
        else:
            logger.info(f"Notification service: {self.notification_service_url}")
        logger.info(f"From: {self.default_from_name} <{self.default_from_email}>")


# Global configuration instances
_app_config: Optional[AppConfig] = None
_db_config: Optional[DatabaseConfig] = None
_redis_config: Optional[RedisConfig] = None
_smtp_config: Optional[SMTPConfig] = None


def get_app_config() -> AppConfig:
    """Get application configuration instance"""
    global _app_config
    if _app_config is None:
        _app_config = AppConfig()
    return _app_config


def get_db_config() -> DatabaseConfig:
    """Get database configuration instance"""
    global _db_config
    if _db_config is None:
        _db_config = DatabaseConfig()
    return _db_config


def get_redis_config() -> RedisConfig:
    """Get Redis configuration instance"""
    global _redis_config
    if _redis_config is None:
        _redis_config = RedisConfig()
    return _redis_config


def get_smtp_config() -> SMTPConfig:
    """Get SMTP configuration instance"""
    global _smtp_config
    if _smtp_config is None:
        _smtp_config = SMTPConfig()
    return _smtp_config


def validate_configuration():
    """Validate and log all configuration settings"""
    app_config = get_app_config()
    smtp_config = get_smtp_config()

    app_config.log_config()
    get_db_config().log_config()
    get_redis_config().log_config()
    smtp_config.log_config()

    if app_config.is_production():
        if app_config.frontend_url.startswith("http://"):
            logger.warning("Production frontend URL is not using https")
        if smtp_config.notifier_backend == "smtp" and not smtp_config.smtp_username:
            logger.warning("Production SMTP detected but credentials not provided")

    logger.info("Configuration validation completed")
    return True
