#!/usr/bin/env python3
"""
Setup Verification Script

Validates configuration and connections before running the application.
Run this after setting up your .env file to see which channels will really
deliver and which ones are downgraded to mock logging.

Usage:
    python scripts/verify_setup.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(project_root / ".env")


def print_header(title: str) -> None:
    """Print section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print(f"{'='*60}")


def print_result(name: str, success: bool, message: str = "") -> None:
    """Print check result."""
    status = "[PASS]" if success else "[FAIL]"
    color = "\033[92m" if success else "\033[91m"
    reset = "\033[0m"
    msg = f" - {message}" if message else ""
    print(f"  {color}{status}{reset} {name}{msg}")


def check_env_file() -> bool:
    """Check if .env file exists. Defaults are usable without one."""
    env_path = project_root / ".env"
    exists = env_path.exists()
    if not exists:
        print_result(".env file", True, "Not found, using defaults (mock delivery)")
    else:
        print_result(".env file", True, "Found")
    return exists


def check_dependencies() -> bool:
    """Check if required Python packages are installed."""
    required_packages = [
        "fastapi",
        "uvicorn",
        "pydantic",
        "pydantic_settings",
        "sqlalchemy",
        "asyncpg",
        "redis",
        "httpx",
    ]

    missing = []
    for package in required_packages:
        try:
            __import__(package)
        except ImportError:
            missing.append(package)

    if missing:
        print_result("Python packages", False, f"Missing: {', '.join(missing)}")
        return False
    print_result("Python packages", True, "All required packages installed")
    return True


def load_settings():
    """Load settings, reporting validation errors (e.g. unknown provider names)."""
    from pydantic import ValidationError
    from app.config import Settings

    try:
        settings = Settings()
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            print_result(field.upper(), False, error["msg"])
        return None

    print_result("Settings", True, f"{settings.app_env} mode")
    return settings


def describe_providers(settings) -> dict[str, str]:
    """Active backend per channel, 'mock' where delivery is only logged."""
    from app.core.notifications.providers import (
        create_email_provider,
        create_sms_provider,
        create_whatsapp_provider,
    )

    providers = (
        create_sms_provider(settings),
        create_email_provider(settings),
        create_whatsapp_provider(settings),
    )
    return {
        provider.channel.value: "mock" if provider.is_mock else provider.name
        for provider in providers
    }


def check_providers(settings) -> bool:
    """Report configured versus active provider per channel."""
    configured = {
        "sms": settings.sms_provider,
        "email": settings.email_provider,
        "whatsapp": settings.whatsapp_provider,
    }
    active = describe_providers(settings)

    all_real = True
    for channel, name in configured.items():
        if name == "mock":
            print_result(channel.upper(), True, "mock (configured)")
        elif active[channel] == "mock":
            print_result(channel.upper(), False, f"{name} has missing credentials, mock in use")
            all_real = False
        else:
            print_result(channel.upper(), True, name)
    return all_real


async def check_postgres() -> bool:
    """Verify PostgreSQL connection."""
    try:
        from app.infra.database import check_db_health, close_db
        healthy = await check_db_health()
        await close_db()

        if healthy:
            print_result("PostgreSQL", True, "Connection successful")
        else:
            print_result("PostgreSQL", False, "Connection failed")
        return healthy

    except Exception as e:
        print_result("PostgreSQL", False, str(e)[:50])
        return False


async def check_redis() -> bool:
    """Verify Redis connection."""
    try:
        from app.infra.redis import RedisClient, check_redis_health
        healthy = await check_redis_health()
        await RedisClient.close()

        if healthy:
            print_result("Redis", True, "Connection successful")
        else:
            print_result("Redis", False, "Connection failed (reminder markers kept in memory)")
        return healthy

    except Exception as e:
        print_result("Redis", False, str(e)[:50])
        return False


async def main():
    """Run all verification checks."""
    print("\n" + "="*60)
    print(" Hospital Notifications - Setup Verification")
    print("="*60)

    print_header("Environment File")
    check_env_file()

    print_header("Python Dependencies")
    if not check_dependencies():
        return 1

    print_header("Settings")
    settings = load_settings()
    if settings is None:
        return 1

    print_header("Notification Providers")
    providers_ok = check_providers(settings)

    print_header("Service Connections")
    db_ok = await check_postgres()
    await check_redis()  # Non-critical

    print_header("Summary")

    if not db_ok:
        print("\n  \033[91mCRITICAL: PostgreSQL is not reachable.\033[0m")
        print("  Availability checks and reminder sweeps need the appointment database.")
        print(f"  DATABASE_URL is currently: {settings.database_url.split('@')[-1]}")
        print()
        return 1
    elif not providers_ok:
        print("\n  \033[93mWARNING: Some channels fall back to mock delivery.\033[0m")
        print("  Messages on those channels are only written to the log.")
        print()
        return 0
    else:
        print("\n  \033[92mAll checks passed!\033[0m")
        print("  You can start the application with:")
        print("    uvicorn app.main:app --reload")
        print()
        return 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
