"""
validator — walidacja jednostek (funkcje, twierdzenia, definicje, wzory).

Interfejs publiczny:
    UnitValidator       — reguły per typ + progi confidence + limit cytatów
    validate_span_ids   — czy wszystkie span_ids istnieją w dokumencie
    has_excessive_quotes
    validate_batch      — raporty dla listy jednostek
    ValidationReport, ValidationError, ErrorCode — typy raportu

Typowe użycie:
    from validator import UnitValidator, validate_batch

    validator = UnitValidator(settings.thresholds, settings.max_quote_chars)
    for unit, report in validate_batch(validator, UnitType.CLAIMS, claims, known_ids):
        if not report.valid:
            for e in report.errors:
                print(e.code, e.field, e.message)
"""

from .types import ErrorCode, ValidationError, ValidationReport
from .unit_validator import (
    UnitValidator,
    has_excessive_quotes,
    validate_batch,
    validate_span_ids,
)

__all__ = [
    "ErrorCode",
    "ValidationError",
    "ValidationReport",
    "UnitValidator",
    "has_excessive_quotes",
    "validate_batch",
    "validate_span_ids",
]
