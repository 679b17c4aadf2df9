"""
Configuration Management for the git execution engine
Centralizes all environment-based configuration and settings
"""

import os
import logging
from logging.handlers import RotatingFileHandler


class SecretRedactionFilter(logging.Filter):
    """Mask credential values that are in flight for a running git operation"""
    def filter(self, record: logging.LogRecord) -> bool:
        from git_exec.redaction import secret_registry

        message = record.getMessage()
        redacted = secret_registry.redact(message)
        if redacted != message:
            # Freeze the rendered message so handlers never re-render the raw args
            record.msg = redacted
            record.args = None
        return True


def setup_logging():
    """Configure application logging with rotation"""
    from .paths import LOG_DIR

    # Create logs directory with secure permissions
    os.makedirs(LOG_DIR, mode=0o700, exist_ok=True)

    root_logger = logging.getLogger()

    # Close and clear any existing handlers to prevent file descriptor leaks
    for handler in root_logger.handlers[:]:  # Copy list to avoid modification during iteration
        handler.close()
        root_logger.removeHandler(handler)

    level = getattr(logging, AppConfig.LOG_LEVEL.upper(), logging.INFO)
    root_logger.setLevel(level)

    redaction_filter = SecretRedactionFilter()

    # Console handler for stdout
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    console_handler.addFilter(redaction_filter)

    # Max 10MB per file, keep 14 backups
    file_handler = RotatingFileHandler(
        os.path.join(LOG_DIR, 'gitexec.log'),
        maxBytes=10*1024*1024,  # 10MB
        backupCount=14,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(console_formatter)
    file_handler.addFilter(redaction_filter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # docker-py logs full request URLs at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("docker").setLevel(logging.WARNING)


_VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class AppConfig:
    """Main application configuration"""

    # Container settings
    CONTAINER_WAIT_TIMEOUT = int(os.getenv('GITEXEC_CONTAINER_WAIT_TIMEOUT', 300))
    CONTAINER_SHELL = os.getenv('GITEXEC_CONTAINER_SHELL', 'sh')

    # Credential injection
    ASKPASS_PATH = os.getenv('GITEXEC_ASKPASS_PATH', '/tmp/git-askpass.sh')

    # Git behavior
    DEFAULT_COMMIT_MESSAGE = os.getenv('GITEXEC_DEFAULT_COMMIT_MESSAGE', 'Manual push from workspace')
    DIFF_CONTEXT_LINES = int(os.getenv('GITEXEC_DIFF_CONTEXT_LINES', 10))

    # Import centralized paths
    from .paths import DATABASE_URL as DEFAULT_DATABASE_URL

    # Database settings (audit records)
    DATABASE_URL = os.getenv('GITEXEC_DATABASE_URL', DEFAULT_DATABASE_URL)

    # Logging
    LOG_LEVEL = os.getenv('GITEXEC_LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls):
        """Validate configuration"""
        if cls.CONTAINER_WAIT_TIMEOUT < 1:
            raise ValueError(f"Container wait timeout must be positive: {cls.CONTAINER_WAIT_TIMEOUT}")

        if not cls.ASKPASS_PATH.startswith('/'):
            raise ValueError(f"Askpass path must be absolute: {cls.ASKPASS_PATH}")

        if cls.DIFF_CONTEXT_LINES < 0:
            raise ValueError(f"Diff context lines cannot be negative: {cls.DIFF_CONTEXT_LINES}")

        if cls.LOG_LEVEL.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {cls.LOG_LEVEL}")

        return True
