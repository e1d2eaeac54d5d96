"""
Pay band policy table.

Pay bands are business policy supplied by the deploying organisation, keyed
by (category, grade). Values are (min_percentage, max_percentage) of cohort
revenue. The table is loaded once at startup and must cover all 21
combinations; gaps are reported in full before the service takes traffic.
"""

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Optional, Union

from libs.common.logging import get_logger
from services.scoring_service.errors import IncompleteConfiguration
from services.scoring_service.models import CoachGrade, ProgramCategory

logger = get_logger(__name__)

DEFAULT_PAY_BAND_PATH = Path(__file__).parent / "config" / "pay_bands.json"


class PayBand(NamedTuple):
    min_percentage: int
    max_percentage: int

    @property
    def offered(self) -> bool:
        # A (0, 0) band marks a combination the organisation does not run
        return self.max_percentage > 0


class PayBandTable:
    """Read-only, fully populated (category, grade) → PayBand lookup."""

    def __init__(self, bands: Mapping[tuple[ProgramCategory, CoachGrade], PayBand]):
        missing = [
            f"{category.value}/{grade.value}"
            for category in ProgramCategory
            for grade in CoachGrade
            if (category, grade) not in bands
        ]
        if missing:
            raise IncompleteConfiguration(
                f"Pay band table is missing {len(missing)} of "
                f"{len(ProgramCategory) * len(CoachGrade)} entries: "
                + ", ".join(missing),
                missing=missing,
            )
        self._bands = MappingProxyType(dict(bands))

    def get(self, category: ProgramCategory, grade: CoachGrade) -> PayBand:
        return self._bands[(category, grade)]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "PayBandTable":
        """Build a table from ``{category: {grade: [min, max]}}``.

        Unknown keys and malformed bands are configuration defects and are
        reported together with missing entries.
        """
        if not isinstance(raw, Mapping):
            raise IncompleteConfiguration("Pay band table must be a JSON object")

        bands: dict[tuple[ProgramCategory, CoachGrade], PayBand] = {}
        problems: list[str] = []

        for category_key, grades in raw.items():
            try:
                category = ProgramCategory(category_key)
            except ValueError:
                problems.append(f"unknown category {category_key!r}")
                continue
            if not isinstance(grades, Mapping):
                problems.append(f"{category_key}: expected an object of grades")
                continue

            for grade_key, values in grades.items():
                try:
                    grade = CoachGrade(grade_key)
                except ValueError:
                    problems.append(f"{category_key}: unknown grade {grade_key!r}")
                    continue
                band = _parse_band(values)
                if band is None:
                    problems.append(
                        f"{category_key}/{grade_key}: expected [min, max] "
                        f"integer percentages with 0 <= min <= max <= 100"
                    )
                    continue
                bands[(category, grade)] = band

        if problems:
            raise IncompleteConfiguration(
                "Pay band table is malformed: " + "; ".join(problems),
                missing=problems,
            )
        return cls(bands)


def _parse_band(values: Any) -> Optional[PayBand]:
    if not isinstance(values, (list, tuple)) or len(values) != 2:
        return None
    low, high = values
    if isinstance(low, bool) or isinstance(high, bool):
        return None
    if not isinstance(low, int) or not isinstance(high, int):
        return None
    if not 0 <= low <= high <= 100:
        return None
    return PayBand(low, high)


def load_pay_band_table(path: Optional[Union[str, Path]] = None) -> PayBandTable:
    """Load and validate the pay band table from a JSON file.

    Raises:
        IncompleteConfiguration: file missing, unreadable, or any of the 21
            entries missing or malformed.
    """
    path = Path(path) if path else DEFAULT_PAY_BAND_PATH
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise IncompleteConfiguration(
            f"Cannot read pay band table {path}: {e}"
        ) from e

    table = PayBandTable.from_mapping(raw)
    logger.info(f"Loaded pay band table from {path}")
    return table
