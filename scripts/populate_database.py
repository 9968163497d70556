"""
Seed the catalog database with shows and homepage categories.
Shows come from a CSV or JSON export; categories from a JSON list.
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import argparse
import json
import logging

import numpy as np
import pandas as pd

from tvtantrum_catalog_service.errors import ValidationError
from tvtantrum_catalog_service.models import Base
from tvtantrum_catalog_service.models.database import SessionLocal, engine
from tvtantrum_catalog_service.repos import CategoryRepository, ShowRepository
from tvtantrum_catalog_service.repos.show_query_executor import SHOW_FIELDS
from tvtantrum_catalog_service.repos.show_repository import BOOL_FIELDS, INT_FIELDS, LIST_FIELDS, TEXT_FIELDS

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

# Export column (snake_case or camelCase) -> payload field
COLUMN_TO_FIELD = {
    **{column: field for field, column in SHOW_FIELDS.items()},
    **{field: field for field in SHOW_FIELDS},
}

TRUE_STRINGS = {"true", "t", "yes", "y", "1"}


def clean_dataframe_for_db(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean DataFrame by replacing NaN/NA values with None for database compatibility.

    Args:
        df: Input DataFrame

    Returns:
        Cleaned DataFrame
    """
    # Replace various types of missing values with None
    df = df.astype(object)
    df = df.replace({np.nan: None, pd.NA: None})
    df = df.where(pd.notnull(df), None)

    return df


def _to_list(value) -> list | None:
    if value is None:
        return None
    if isinstance(value, (list, tuple, np.ndarray)):
        return [str(item) for item in value]
    text = str(value).strip()
    if text.startswith("["):
        try:
            return [str(item) for item in json.loads(text)]
        except json.JSONDecodeError:
            pass
    # Postgres array exports look like {a,b}
    text = text.strip("{}[]")
    return [item.strip().strip('"') for item in text.split(",")]


def _to_bool(value) -> bool | None:
    if value is None:
        return None
    if isinstance(value, (bool, np.bool_, int, float, np.number)):
        return bool(value)
    return str(value).strip().lower() in TRUE_STRINGS


def _to_int(value):
    if isinstance(value, (np.integer, int)) and not isinstance(value, bool):
        return int(value)
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return int(value)
    return value


def row_to_show_payload(row: dict) -> dict:
    """
    Convert an exported row into a show payload.

    Column names may be snake_case or camelCase. ``id`` and columns with no
    matching show field are dropped, as are empty values.

    Args:
        row: One record from the export

    Returns:
        camelCase payload accepted by ShowRepository
    """
    payload = {}
    for column, value in row.items():
        field = COLUMN_TO_FIELD.get(column)
        if field is None or field == "id" or value is None:
            continue

        if field in LIST_FIELDS:
            value = _to_list(value)
        elif field in BOOL_FIELDS:
            value = _to_bool(value)
        elif field in INT_FIELDS:
            value = _to_int(value)
        elif field in TEXT_FIELDS or isinstance(value, str):
            value = str(_to_int(value))

        payload[field] = value
    return payload


def load_shows(shows_path: Path) -> list[dict]:
    """
    Load show payloads from a CSV or JSON export.

    Args:
        shows_path: Path to a .csv or .json file

    Returns:
        List of show payloads
    """
    if not shows_path.exists():
        raise FileNotFoundError(f"Shows file not found: {shows_path}")

    if shows_path.suffix.lower() == ".json":
        shows_df = pd.read_json(shows_path)
    else:
        shows_df = pd.read_csv(shows_path)
    logger.info(f"Loaded {len(shows_df)} shows from {shows_path}")

    # Clean DataFrame - replace NaN with None
    shows_df = clean_dataframe_for_db(shows_df)

    return [row_to_show_payload(row) for row in shows_df.to_dict('records')]


def load_categories(categories_path: Path) -> list[dict]:
    """Load homepage category payloads from a JSON list."""
    if not categories_path.exists():
        raise FileNotFoundError(f"Categories file not found: {categories_path}")

    with open(categories_path) as f:
        categories = json.load(f)

    if not isinstance(categories, list):
        raise ValueError(f"{categories_path} must contain a JSON list of categories")

    logger.info(f"Loaded {len(categories)} categories from {categories_path}")
    return categories


def seed_shows(payloads: list[dict], batch_size: int = 100, clear_existing: bool = False) -> int:
    """
    Store show payloads in the database.

    Returns:
        Number of shows stored
    """
    logger.info("=" * 70)
    logger.info("SEEDING SHOWS")
    logger.info("=" * 70)

    db = SessionLocal()
    try:
        repo = ShowRepository(db)
        return repo.bulk_store_shows(payloads, batch_size=batch_size, clear_existing=clear_existing)
    finally:
        db.close()


def seed_categories(categories: list[dict]) -> int:
    """
    Store homepage categories, skipping invalid ones.

    Returns:
        Number of categories stored
    """
    logger.info("=" * 70)
    logger.info("SEEDING HOMEPAGE CATEGORIES")
    logger.info("=" * 70)

    db = SessionLocal()
    try:
        repo = CategoryRepository(db)
        count = 0
        for category in categories:
            try:
                repo.create_category(category)
                count += 1
            except ValidationError as e:
                logger.warning(f"Skipping category {category.get('name')!r}: {e}")

        logger.info(f"✓ Stored {count} homepage categories")
        return count
    finally:
        db.close()


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description='Seed the catalog database with shows and homepage categories'
    )
    parser.add_argument(
        '--shows-file',
        type=str,
        default=None,
        help='CSV or JSON export of shows'
    )
    parser.add_argument(
        '--categories-file',
        type=str,
        default=None,
        help='JSON list of homepage categories'
    )
    parser.add_argument(
        '--batch-size',
        type=int,
        default=100,
        help='Shows per commit (default: 100)'
    )
    parser.add_argument(
        '--clear',
        action='store_true',
        help='Delete existing shows before seeding'
    )
    parser.add_argument(
        '--create-tables',
        action='store_true',
        help='Create missing tables before seeding'
    )

    args = parser.parse_args()

    if not args.shows_file and not args.categories_file:
        parser.error("Nothing to do: pass --shows-file and/or --categories-file")

    logger.info("=" * 70)
    logger.info("POPULATE CATALOG DATABASE")
    logger.info("=" * 70)
    logger.info(f"Shows file: {args.shows_file}")
    logger.info(f"Categories file: {args.categories_file}")
    logger.info(f"Clear existing shows: {args.clear}")
    logger.info("=" * 70)

    try:
        if args.create_tables:
            Base.metadata.create_all(engine)
            logger.info("✓ Tables created")

        show_count = 0
        category_count = 0

        if args.shows_file:
            payloads = load_shows(Path(args.shows_file))
            show_count = seed_shows(payloads, batch_size=args.batch_size, clear_existing=args.clear)
        else:
            logger.info("\n⊘ Skipping shows")

        if args.categories_file:
            categories = load_categories(Path(args.categories_file))
            category_count = seed_categories(categories)
        else:
            logger.info("\n⊘ Skipping homepage categories")

        # Final summary
        logger.info("\n" + "=" * 70)
        logger.info("✓ DATABASE POPULATION COMPLETE")
        logger.info("=" * 70)
        logger.info(f"Shows stored: {show_count}")
        logger.info(f"Categories stored: {category_count}")

    except Exception as e:
        logger.error(f"Error during database population: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
