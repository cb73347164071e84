#!/usr/bin/env python3
"""
Seed the exercise library and pre-built workout templates into Snowflake.

Only items whose names are not already present are inserted, so the
script can be re-run after the catalog grows.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --dry-run

Requires:
    - .env file with Snowflake credentials
    - Tables created from scripts/schema.sql
"""

import sys
from pathlib import Path

# Add the project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from fittrack.config.settings import get_settings
from fittrack.core.workouts import WorkoutTracker
from fittrack.core.workouts.catalog import library_items, prebuilt_templates
from fittrack.infrastructure.snowflake.client import create_snowflake_connection
from fittrack.infrastructure.snowflake.config import SnowflakeConfig
from fittrack.infrastructure.snowflake.repositories import (
    ExerciseRepository,
    LibraryRepository,
    TemplateRepository,
)


def seed(dry_run: bool = False) -> bool:
    settings = get_settings()

    items = library_items()
    templates = prebuilt_templates()

    if dry_run:
        print("\n=== DRY RUN - No data will be inserted ===\n")
        for item in items:
            print(f"Library: {item.category}/{item.name}")
        for template in templates:
            print(f"Template: {template.category}/{template.name} ({len(template.exercises)} exercises)")
        print(f"\nTotal: {len(items)} library items, {len(templates)} templates")
        return True

    missing = settings.validate_required_fields()
    if missing:
        print(f"ERROR: Missing configuration: {', '.join(missing)}")
        return False

    config = SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )

    try:
        print(f"Connecting to Snowflake account: {settings.snowflake_account}")
        with create_snowflake_connection(config, mock_mode=settings.snowflake_mock_mode) as conn:
            library_added = LibraryRepository(conn).seed(items)

            tracker = WorkoutTracker(
                exercises=ExerciseRepository(conn),
                templates=TemplateRepository(conn),
                tz=settings.stats_tz,
                free_template_limit=settings.free_template_limit,
            )
            templates_added = tracker.seed_prebuilt_templates()

    except Exception as e:
        print(f"ERROR seeding Snowflake: {e}")
        return False

    print("\n=== Seed Complete ===")
    print(f"Library items added: {library_added} of {len(items)}")
    print(f"Templates added: {templates_added} of {len(templates)}")
    return True


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Seed the exercise library and pre-built templates')
    parser.add_argument('--dry-run', action='store_true', help='List the catalog only, don\'t insert')
    args = parser.parse_args()

    success = seed(dry_run=args.dry_run)
    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
