"""
Configuration Management

시스템 설정 관리
"""

import os
import shutil
import subprocess
import yaml
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any
from pathlib import Path
import logging

from .errors import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")
NUMERIC_FIELDS = {
    "github": ("timeout_seconds", "max_retries", "per_page"),
    "logging": ("max_file_size", "backup_count"),
}


def graphql_url_for(api_base_url: str) -> str:
    """
    Derive the GraphQL endpoint from a REST base URL.

    github.com serves both under api.github.com; GitHub Enterprise serves REST
    at /api/v3 and GraphQL at /api/graphql.
    """
    base = api_base_url.rstrip('/')
    if base.endswith('/v3'):
        base = base[:-len('/v3')]
    return f"{base}/graphql"


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = DEFAULT_API_URL
    graphql_url: Optional[str] = None
    timeout_seconds: int = 30
    max_retries: int = 3
    per_page: int = 100

    @property
    def resolved_graphql_url(self) -> str:
        """GraphQL 엔드포인트 (미설정 시 REST base URL 기준)"""
        return self.graphql_url or graphql_url_for(self.api_base_url)


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "WARNING"
    format: str = DEFAULT_LOG_FORMAT
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        try:
            return cls(
                github=GitHubConfig(
                    token=_token_from_env(),
                    api_base_url=os.getenv("GITHUB_API_URL", DEFAULT_API_URL),
                    graphql_url=os.getenv("GITHUB_GRAPHQL_URL"),
                    timeout_seconds=int(os.getenv("GITHUB_TIMEOUT", "30")),
                    max_retries=int(os.getenv("GITHUB_MAX_RETRIES", "3")),
                    per_page=int(os.getenv("GITHUB_PER_PAGE", "100")),
                ),
                logging=LoggingConfig(
                    level=os.getenv("LOG_LEVEL", "WARNING"),
                    format=os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT),
                    file_path=os.getenv("LOG_FILE"),
                ),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting in environment: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot parse config file {config_path}: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        try:
            config = cls(
                github=GitHubConfig(**(config_data.get('github') or {})),
                logging=LoggingConfig(**(config_data.get('logging') or {})),
            )
        except TypeError as e:
            raise ConfigError(f"Unknown setting in {config_path}: {e}") from e

        # YAML 값은 문자열일 수 있으므로 숫자 필드를 정규화
        try:
            for section, names in NUMERIC_FIELDS.items():
                section_config = getattr(config, section)
                for name in names:
                    setattr(section_config, name, int(getattr(section_config, name)))
            config.logging.level = str(config.logging.level)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting in {config_path}: {e}") from e

        # 파일에 토큰이 없으면 환경 변수 사용
        if not config.github.token:
            config.github.token = _token_from_env()
        return config

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        if self.github.timeout_seconds <= 0:
            errors.append("Timeout must be positive")

        if self.github.max_retries < 0:
            errors.append("max_retries cannot be negative")

        # GitHub REST API 페이지 크기 제한
        if not 1 <= self.github.per_page <= 100:
            errors.append("per_page must be between 1 and 100")

        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if str(self.logging.level).upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ConfigError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        github = asdict(self.github)
        # 보안상 토큰은 제외
        github.pop('token')
        github['authenticated'] = bool(self.github.token)
        return {
            'github': github,
            'logging': asdict(self.logging),
        }


def _token_from_env() -> Optional[str]:
    for name in TOKEN_ENV_VARS:
        token = os.getenv(name)
        if token:
            return token.strip()
    return None


def resolve_token(config: AppConfig) -> Optional[str]:
    """
    Find a GitHub token for the run.

    Order: the configured token (file or GITHUB_TOKEN / GH_TOKEN), then the
    credential stored by the GitHub CLI (``gh auth token``).
    """
    if config.github.token:
        return config.github.token

    if shutil.which("gh") is None:
        logger.debug("GitHub CLI not installed; no stored credential")
        return None

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"gh auth token failed: {e}")
        return None

    token = result.stdout.strip()
    if result.returncode != 0 or not token:
        logger.debug("GitHub CLI has no stored credential")
        return None
    return token


def setup_logging(config: LoggingConfig, verbosity: int = 0) -> None:
    """
    Configure the root logger.

    Logs go to stderr (or a rotating file when ``file_path`` is set), never
    to stdout, which carries the rendered document.
    """
    level = getattr(logging, config.level.upper())
    if verbosity == 1:
        level = min(level, logging.INFO)
    elif verbosity >= 2:
        level = logging.DEBUG

    if config.file_path:
        from logging.handlers import RotatingFileHandler

        try:
            handler = RotatingFileHandler(
                config.file_path,
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
            )
        except OSError as e:
            raise ConfigError(f"Cannot open log file {config.file_path}: {e}") from e
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(config.format))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load configuration from a YAML file when given, else the environment."""
    config = AppConfig.from_yaml(config_path) if config_path else AppConfig.from_env()
    config.validate()
    return config
