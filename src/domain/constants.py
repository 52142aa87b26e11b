"""
Domain Constants: 템플릿 컬렉션 전역 상수.

default.yaml에서 오버라이드 가능한 기본값들.
"""

# =============================================================================
# Loader Defaults
# =============================================================================

DEFAULT_PATTERNS = ("*.html",)
DEFAULT_ENCODING = "utf-8"

# autoescape 적용 확장자 (Jinja2 select_autoescape)
AUTOESCAPE_EXTENSIONS = ("html", "htm", "xml")

# =============================================================================
# Configuration
# =============================================================================

CONFIG_FILENAME = "default.yaml"
CONFIG_TEMPLATES_SECTION = "templates"
CONFIG_LOGGING_SECTION = "logging"

DEFAULT_TEMPLATES_ROOT = "templates"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# 개발용 토글: 설정 파일보다 우선
DYNAMIC_ENV_VAR = "TEMPLATES_DYNAMIC"
TRUTHY_VALUES = ("1", "true", "yes", "on")
