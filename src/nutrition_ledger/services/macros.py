"""Macro resolution: catalog lookup with an estimation fallback."""

import logging
import math
import re
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from nutrition_ledger.adapters.openfoodfacts_client import CatalogClient
from nutrition_ledger.domain.errors import UnparsableEstimate
from nutrition_ledger.domain.nutrition import (
    ActivityEstimate,
    CatalogHit,
    CatalogProduct,
    MacroEstimate,
    MacroSource,
    NeedsEstimate,
    OracleMacros,
    Resolved,
    ResponseShape,
    Unresolved,
)

UNKNOWN_PRODUCT = "Unknown product"
NOT_FOUND = "not_found"
UNPARSABLE_ESTIMATE = "unparsable_estimate"

_NUTRIMENT_KEYS = {
    "kcal": "energy-kcal_100g",
    "protein_g": "proteins_100g",
    "fat_g": "fat_100g",
    "carbs_g": "carbohydrates_100g",
}
_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_NUMBER_TOKEN = re.compile(r"-?\d+(?:[.,]\d+)*")
_DECIMAL_NUMBER = re.compile(r"\d+(?:[.,](?!\d{3}$)\d+)?")

_logger = logging.getLogger(__name__)


class EstimationClient(Protocol):
    """Interface for the natural-language estimation service."""

    async def complete(self, prompt: str, response_shape: ResponseShape) -> str:
        """Return the raw text answer for a prompt."""


@dataclass
class MacroResolutionService:
    """Resolves macros from the catalog, estimating when data is missing."""

    catalog_client: CatalogClient
    estimation_client: EstimationClient
    debug: bool = False

    async def lookup(self, code: str) -> CatalogHit | NeedsEstimate | Unresolved:
        """Query the catalog and decide whether an estimate is needed."""
        payload = await self.catalog_client.get_product(code)
        product = parse_product(code, payload)
        if product is None:
            if self.debug:
                _logger.info("Catalog miss: code=%s", code)
            return Unresolved(reason=NOT_FOUND)
        if has_complete_macros(product):
            return CatalogHit(product=product)
        if self.debug:
            _logger.info("Catalog incomplete, estimating: code=%s", code)
        return NeedsEstimate(description=product.name, product=product)

    async def estimate(self, state: NeedsEstimate) -> Resolved | Unresolved:
        """Ask the estimation service once and parse its answer."""
        raw = await self.estimation_client.complete(
            build_product_prompt(state.description), ResponseShape.JSON
        )
        try:
            macros = parse_macro_estimate(raw)
        except UnparsableEstimate as exc:
            _logger.warning("Unparsable product estimate: %s", exc)
            return Unresolved(reason=UNPARSABLE_ESTIMATE, raw_response=exc.raw_response)
        return Resolved(
            name=state.description,
            estimate=MacroEstimate(
                kcal=macros.kcal,
                protein_g=macros.protein_g,
                fat_g=macros.fat_g,
                carbs_g=macros.carbs_g,
                source=MacroSource.ESTIMATED,
            ),
        )

    async def resolve_barcode(self, code: str) -> Resolved | Unresolved:
        """Run the full lookup and estimation chain for a product code."""
        state = await self.lookup(code)
        if isinstance(state, CatalogHit):
            return resolve_catalog_hit(state)
        if isinstance(state, NeedsEstimate):
            return await self.estimate(state)
        return state

    async def estimate_activity(
        self, description: str, weight_kg: float
    ) -> ActivityEstimate | Unresolved:
        """Estimate calories burned by a described activity."""
        raw = await self.estimation_client.complete(
            build_activity_prompt(description, weight_kg), ResponseShape.BARE_NUMBER
        )
        try:
            kcal = parse_kcal_estimate(raw)
        except UnparsableEstimate as exc:
            _logger.warning("Unparsable activity estimate: %s", exc)
            return Unresolved(reason=UNPARSABLE_ESTIMATE, raw_response=exc.raw_response)
        if self.debug:
            _logger.info("Activity estimate: %s kcal", kcal)
        return ActivityEstimate(kcal=kcal)


def resolve_catalog_hit(state: CatalogHit) -> Resolved:
    product = state.product
    return Resolved(
        name=product.name,
        estimate=MacroEstimate(
            kcal=product.kcal or 0.0,
            protein_g=product.protein_g or 0.0,
            fat_g=product.fat_g or 0.0,
            carbs_g=product.carbs_g or 0.0,
            source=MacroSource.CATALOG,
        ),
    )


def is_missing_macro(value: float | None) -> bool:
    """Treat absent and zero macro values as missing."""
    return value is None or value == 0


def has_complete_macros(product: CatalogProduct) -> bool:
    return not any(
        is_missing_macro(value)
        for value in (product.kcal, product.protein_g, product.fat_g, product.carbs_g)
    )


def parse_product(code: str, payload: dict[str, object]) -> CatalogProduct | None:
    """Map a catalog payload to a product, or None when it is unknown."""
    product = payload.get("product")
    if not isinstance(product, dict):
        return None
    nutriments = product.get("nutriments")
    if not isinstance(nutriments, dict):
        nutriments = {}
    values = {
        field: _optional_float(nutriments.get(key))
        for field, key in _NUTRIMENT_KEYS.items()
    }
    return CatalogProduct(
        code=code,
        name=str(product.get("product_name") or UNKNOWN_PRODUCT),
        **values,
    )


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers around a response."""
    return _CODE_FENCE.sub("", text).strip()


def parse_macro_estimate(raw: str) -> OracleMacros:
    """Parse a JSON macro estimate, raising UnparsableEstimate on failure."""
    cleaned = strip_code_fences(raw or "")
    try:
        return OracleMacros.model_validate_json(cleaned)
    except ValidationError as exc:
        raise UnparsableEstimate(
            f"Estimate is not a valid macro object: {exc.error_count()} errors",
            raw_response=raw,
        ) from exc


def parse_kcal_estimate(raw: str) -> float:
    """Parse a single bare number, raising UnparsableEstimate otherwise."""
    tokens = _NUMBER_TOKEN.findall(strip_code_fences(raw or ""))
    if len(tokens) != 1:
        raise UnparsableEstimate(
            f"Expected one number, found {len(tokens)}", raw_response=raw
        )
    token = tokens[0]
    if not _DECIMAL_NUMBER.fullmatch(token):
        raise UnparsableEstimate(
            f"Not a plain positive decimal: {token}", raw_response=raw
        )
    return float(token.replace(",", "."))


def build_product_prompt(product_name: str) -> str:
    return (
        "You are a nutrition expert. Estimate the nutritional values per 100 g "
        f'of the product "{product_name}". '
        "Reply only with a JSON object of the form "
        '{"kcal": number, "protein_g": number, "fat_g": number, "carbs_g": number}.'
    )


def build_activity_prompt(description: str, weight_kg: float) -> str:
    return (
        "You are a sports scientist estimating energy expenditure. "
        f"I weigh {weight_kg:g} kg. I did the following: {description}. "
        "Estimate realistically how many kilocalories I burned. "
        "Reply only with a single number without unit or text. "
        "Do not use thousands separators."
    )


def _optional_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.replace(",", "."))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None
