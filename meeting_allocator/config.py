# meeting_allocator/config.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class CapacityConfig:
    """Room capacity cap (applies to one distinguished location only)."""
    limited_location: str = "G10"
    capacity: int = 6  # max distinct participants


@dataclass(frozen=True)
class SearchConfig:
    refine_max_unassigned: int = 10  # refiner is skipped above this many unassigned
    random_enabled: bool = False
    random_iterations: int = 1000
    random_seed: Optional[int] = None


@dataclass(frozen=True)
class OutputConfig:
    version: str = "draft"
    compare_version: Optional[str] = None
    title: str = ""
    out_dir: str = "out"

    @property
    def output_path(self) -> Path:
        return Path(self.out_dir) / f"result.{self.version}.json"

    @property
    def last_output_path(self) -> Optional[Path]:
        if not self.compare_version:
            return None
        return Path(self.out_dir) / f"result.{self.compare_version}.json"


@dataclass(frozen=True)
class AppConfig:
    # naive instants read from a workbook are placed in this zone
    timezone_name: str = "Asia/Hong_Kong"

    capacity: CapacityConfig = field(default_factory=CapacityConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


DEFAULT_CONFIG = AppConfig()
