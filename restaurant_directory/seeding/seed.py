from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from ..restaurants.coordinator import RestaurantDirectory
from ..restaurants.errors import DuplicateError
from ..restaurants.models import RestaurantCreate
from .config import DEFAULT_SEED_CONFIG, SeedConfig

logger = logging.getLogger(__name__)


@dataclass
class SeedReport:
    created: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)


def load_restaurants_csv(
    path: Path,
    config: SeedConfig = DEFAULT_SEED_CONFIG,
) -> list[RestaurantCreate]:
    """
    Read restaurants from a CSV file.

    Whitespace is stripped, rows with a blank name are dropped and only the
    first row for each name is kept.
    """
    df = pd.read_csv(path, dtype=str)

    columns = [config.name_column, config.cuisine_column, config.region_column]
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"Seed file {path} is missing columns: {', '.join(missing)}")

    df = df[columns].fillna("")
    for col in columns:
        df[col] = df[col].str.strip()

    df = df[df[config.name_column] != ""]
    df = df.drop_duplicates(subset=config.name_column, keep="first")

    return [
        RestaurantCreate(
            name=row[config.name_column],
            cuisine=row[config.cuisine_column],
            region=row[config.region_column],
        )
        for _, row in df.iterrows()
    ]


def seed_directory(
    directory: RestaurantDirectory,
    restaurants: list[RestaurantCreate],
) -> SeedReport:
    report = SeedReport()
    for restaurant in restaurants:
        try:
            directory.create(restaurant.name, restaurant.cuisine, restaurant.region)
        except DuplicateError:
            report.duplicates.append(restaurant.name)
            continue
        report.created.append(restaurant.name)

    logger.info(
        "Seeded %d restaurants, skipped %d duplicates",
        len(report.created),
        len(report.duplicates),
    )
    return report


if __name__ == "__main__":
    from ..restaurants.services import get_directory

    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Seed the restaurant directory from a CSV file")
    parser.add_argument("csv_path", type=Path)
    args = parser.parse_args()

    result = seed_directory(get_directory(), load_restaurants_csv(args.csv_path))
    print(f"Seeding complete. Created {len(result.created)}, duplicates {len(result.duplicates)}.")
