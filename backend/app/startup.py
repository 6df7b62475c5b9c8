"""
Application startup validation and logging setup.

Checks run once when the API process starts, before serving requests.
"""

import logging
from typing import List, Tuple
from core.config import settings, validate_production_config
from core.database import engine
from sqlalchemy import text
import sqlalchemy as sa

logger = logging.getLogger(__name__)

REQUIRED_TABLES = [
    'users',
    'restaurants',
    'menu_items',
    'orders',
    'order_items',
    'loyalty_activities',
    'rewards',
    'user_rewards',
    'challenges',
    'user_challenges',
]


def configure_logging(level: str = None):
    """Configure root logging once for the process"""
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    if settings.log_sql_queries:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)


class StartupValidator:
    """Validates application startup requirements"""

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def check_environment_config(self) -> bool:
        try:
            validate_production_config(settings)
        except ValueError as e:
            self.errors.append(f"Configuration validation failed: {str(e)}")
            return False

        if not settings.is_production and settings.jwt_secret_key.startswith("dev-secret"):
            self.warnings.append("Using development JWT_SECRET_KEY - change for production")
        return True

    def check_database_connection(self) -> bool:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            logger.info("Database connection successful")
            return True
        except Exception as e:
            self.errors.append(f"Database connection failed: {str(e)}")
            return False

    def check_required_tables(self) -> bool:
        try:
            existing_tables = sa.inspect(engine).get_table_names()
        except Exception as e:
            self.warnings.append(f"Could not check database tables: {str(e)}")
            return True

        missing_tables = [t for t in REQUIRED_TABLES if t not in existing_tables]
        if missing_tables:
            self.warnings.append(
                f"Missing database tables: {', '.join(missing_tables)}. "
                "Run migrations with: alembic upgrade head"
            )
        return True

    def validate_all(self) -> Tuple[bool, List[str], List[str]]:
        """Run all validation checks"""
        checks = [
            ("Environment Configuration", self.check_environment_config),
            ("Database Connection", self.check_database_connection),
            ("Database Tables", self.check_required_tables),
        ]

        all_passed = True
        for check_name, check_func in checks:
            logger.info(f"Running check: {check_name}")
            if not check_func():
                all_passed = False

        return all_passed, self.errors, self.warnings


def run_startup_checks():
    """
    Run all startup validation checks.

    Raises:
        RuntimeError: If a check fails in production
    """
    logger.info(f"Starting SwiftBite backend ({settings.environment})")

    validator = StartupValidator()
    passed, errors, warnings = validator.validate_all()

    for warning in warnings:
        logger.warning(f"Startup warning: {warning}")
    for error in errors:
        logger.error(f"Startup error: {error}")

    if not passed and settings.is_production:
        raise RuntimeError("Cannot start in production with startup errors")
    elif not passed:
        logger.warning("Starting in development mode despite errors")
    else:
        logger.info("All startup checks passed")

    return passed, warnings
