"""
Application setup and initialization.

Early initialization that must happen before the FastAPI application is
created:
- Environment variable loading
- Settings construction
- Logging configuration
- Sentry initialization

**Documentation References:**
- Entry Points: `ciudadano_digital/main.py` and `ciudadano_digital/server.py` call `setup_application()`
- Configuration: See `ciudadano_digital/config/` for configuration modules
"""
from typing import Optional

from dotenv import load_dotenv

from ciudadano_digital.config.sentry import init_sentry
from ciudadano_digital.config.settings import Settings, get_settings
from ciudadano_digital.utils.logger import configure_logging, get_logger


def setup_application(settings: Optional[Settings] = None) -> Settings:
    """
    Initialize application environment and configuration.

    The order matters:
    1. `.env` is loaded so every component sees the same environment
    2. Settings are built and validated (invalid configuration stops here)
    3. Logging is configured before anything logs
    4. Sentry is initialized before the app is created

    Returns:
        The settings the application should be built with
    """
    load_dotenv()

    if settings is None:
        settings = get_settings()

    configure_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
    )

    init_sentry(settings)

    get_logger(__name__).info(
        "Application setup complete",
        environment=settings.environment,
        api_path=settings.api_path,
    )
    return settings
