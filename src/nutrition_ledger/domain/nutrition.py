"""Nutrition domain models and macro resolution states."""

from dataclasses import dataclass
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class MacroSource(str, Enum):
    """Provenance of a macro value."""

    CATALOG = "catalog"
    ESTIMATED = "estimated"


class ResponseShape(str, Enum):
    """Expected shape of an estimation response."""

    JSON = "json"
    BARE_NUMBER = "bare-number"


@dataclass(frozen=True)
class MacroEstimate:
    """Macros for a food with their provenance."""

    kcal: float
    protein_g: float
    fat_g: float
    carbs_g: float
    source: MacroSource


@dataclass(frozen=True)
class ActivityEstimate:
    """Estimated calories burned by an activity."""

    kcal: float
    source: MacroSource = MacroSource.ESTIMATED


@dataclass(frozen=True)
class CatalogProduct:
    """Product data from the catalog; absent fields stay None."""

    code: str
    name: str
    kcal: float | None
    protein_g: float | None
    fat_g: float | None
    carbs_g: float | None


@dataclass(frozen=True)
class CatalogHit:
    """Catalog returned complete macros."""

    product: CatalogProduct


@dataclass(frozen=True)
class NeedsEstimate:
    """Catalog data is incomplete and must be estimated."""

    description: str
    product: CatalogProduct | None = None


@dataclass(frozen=True)
class Resolved:
    """Terminal state with macros and provenance."""

    name: str
    estimate: MacroEstimate


@dataclass(frozen=True)
class Unresolved:
    """Terminal failure state."""

    reason: str
    raw_response: str | None = None


class OracleMacros(BaseModel):
    """Structured macro payload returned by the estimation service."""

    model_config = ConfigDict(extra="ignore")

    kcal: float = Field(validation_alias=AliasChoices("kcal", "calories", "Kalorien"))
    protein_g: float = Field(
        validation_alias=AliasChoices("protein_g", "protein", "Eiweiß", "Eiweiss")
    )
    fat_g: float = Field(validation_alias=AliasChoices("fat_g", "fat", "Fett"))
    carbs_g: float = Field(
        validation_alias=AliasChoices("carbs_g", "carbs", "Kohlenhydrate")
    )
