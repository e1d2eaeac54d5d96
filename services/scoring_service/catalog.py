"""
Category → scoring dimension labels.

Each program category is scored on its own seven complexity axes, e.g. a
"Learn to Swim" cohort is scored on "Age Group Complexity", "Skill Phase",
etc. while an "Institutional" cohort uses "Institution Type", "Logistics
Complexity", etc.
"""

from types import MappingProxyType
from typing import Mapping, Union

from services.scoring_service.errors import UnknownCategory
from services.scoring_service.models import DIMENSION_COUNT, ProgramCategory

DIMENSION_LABELS: Mapping[ProgramCategory, tuple[str, ...]] = MappingProxyType(
    {
        ProgramCategory.LEARN_TO_SWIM: (
            "Age Group Complexity",
            "Skill Phase",
            "Learner-to-Coach Ratio",
            "Emotional Labour",
            "Environment",
            "Session Prep & Adaptation",
            "Parent/Guardian Management",
        ),
        ProgramCategory.SPECIAL_POPULATIONS: (
            "Population Type",
            "Medical/Safety Coordination",
            "Adaptation Intensity",
            "Psychological Sensitivity",
            "Caregiver/Support Coordination",
            "Liability & Documentation",
            "Coach Certification Required",
        ),
        ProgramCategory.INSTITUTIONAL: (
            "Institution Type",
            "Group Size",
            "Logistics Complexity",
            "Reporting & Accountability",
            "Customization Required",
            "Stakeholder Management",
            "Contract/Commercial Pressure",
        ),
        ProgramCategory.COMPETITIVE_ELITE: (
            "Performance Level",
            "Training Volume",
            "Periodization Complexity",
            "Technical Precision",
            "Mental Performance Coaching",
            "Athlete Management",
            "Competition & Travel",
        ),
        ProgramCategory.CERTIFICATIONS: (
            "Certification Type",
            "Assessment Rigor",
            "Curriculum Standardization",
            "Instructor Qualification Required",
            "Liability & Compliance",
            "Pass Rate Pressure",
            "Materials & Equipment",
        ),
        ProgramCategory.SPECIALIZED_DISCIPLINES: (
            "Discipline Type",
            "Technical Specialization",
            "Safety & Risk Profile",
            "Equipment & Facility Requirements",
            "Physical Conditioning Demands",
            "Coach Background Required",
            "Competition/Performance Pathway",
        ),
        ProgramCategory.ADJACENT_SERVICES: (
            "Service Type",
            "Participant Management",
            "External Partnerships",
            "Operational Complexity",
            "Staff Requirements",
            "Revenue & Commercial Model",
            "Risk & Insurance",
        ),
    }
)


def _check_catalog() -> None:
    missing = [c.value for c in ProgramCategory if c not in DIMENSION_LABELS]
    if missing:
        raise RuntimeError(f"No dimension labels defined for: {', '.join(missing)}")
    for category, labels in DIMENSION_LABELS.items():
        if len(labels) != DIMENSION_COUNT:
            raise RuntimeError(
                f"{category.value} defines {len(labels)} dimension labels, "
                f"expected {DIMENSION_COUNT}"
            )


_check_catalog()


def resolve_category(category: Union[ProgramCategory, str]) -> ProgramCategory:
    """Coerce a wire value into a ProgramCategory, raising UnknownCategory."""
    if isinstance(category, ProgramCategory):
        return category
    try:
        return ProgramCategory(category)
    except (ValueError, TypeError):
        raise UnknownCategory(category) from None


def labels_for(category: Union[ProgramCategory, str]) -> tuple[str, ...]:
    """Return the seven dimension labels for a program category."""
    return DIMENSION_LABELS[resolve_category(category)]


def all_labels() -> dict[ProgramCategory, tuple[str, ...]]:
    return dict(DIMENSION_LABELS)
