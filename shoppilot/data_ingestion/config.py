from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SeedConfig:
    """
    Configuration for loading the sample shops.
    """

    data_dir: Path = Path(__file__).resolve().parent.parent / "data"
    sample_filename: str = "sample_shops.csv"
    owner_email: str = "owner@example.com"
    category_separator: str = ";"

    @property
    def sample_path(self) -> Path:
        return self.data_dir / self.sample_filename


DEFAULT_SEED_CONFIG = SeedConfig()
