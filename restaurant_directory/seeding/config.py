from dataclasses import dataclass


@dataclass(frozen=True)
class SeedConfig:
    """
    Column layout expected in a seed CSV.
    """

    name_column: str = "name"
    cuisine_column: str = "cuisine"
    region_column: str = "region"


DEFAULT_SEED_CONFIG = SeedConfig()
