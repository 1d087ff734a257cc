"""
validator/unit_validator.py — walidacja jednostek przed zapisem.

Reguły per typ:
  FunctionDoc — name, purpose (≤ 400), kroki n = 1..N (dowolna kolejność
                wejścia), niepuste teksty kroków
  Claim       — subject, predicate, object niepuste
  Definition  — term (≤ 120), definition niepuste
  Formula     — name, expression niepuste

Wspólne: ≥ 1 span_id, confidence ≥ próg typu, brak cytatu w cudzysłowie
dłuższego niż max_quote_chars (ochrona przed kopiowaniem źródła).

Walidator nigdy nie modyfikuje jednostki — tylko raportuje błędy.
Sprawdzenie istnienia span_ids (validate_span_ids) wymaga zbioru
znanych id spanów dokumentu, dostarczonego z zewnątrz.
"""

from __future__ import annotations

import re
from typing import Iterable

from data_model.units import Claim, Definition, Formula, FunctionDoc, Unit, UnitType
from validator.types import ErrorCode, ValidationError, ValidationReport

DEFAULT_MAX_QUOTE_CHARS = 300
MAX_PURPOSE_CHARS = 400
MAX_TERM_CHARS    = 120

# Cytat w cudzysłowie prostym lub drukarskim, łącznie ze znakami cudzysłowu.
_QUOTE_RE = re.compile(r'"[^"]*"|“[^”]*”')


def has_excessive_quotes(text: str, max_chars: int) -> bool:
    """True gdy tekst zawiera cytat (ze znakami cudzysłowu) dłuższy niż max_chars."""
    return any(len(m.group(0)) > max_chars for m in _QUOTE_RE.finditer(text))


def validate_span_ids(span_ids: Iterable[str], known_span_ids: set[str]) -> ValidationReport:
    invalid = [sid for sid in span_ids if sid not in known_span_ids]
    if not invalid:
        return ValidationReport()
    return ValidationReport([ValidationError(
        code=ErrorCode.SPAN_ID_UNKNOWN,
        field="span_ids",
        message=f"Nieznane span_ids: {', '.join(invalid)}",
        value=invalid,
    )])


class UnitValidator:
    """
    Walidator jednostek z progami confidence per typ.

    Przykład:
        validator = UnitValidator({UnitType.FUNCTIONS: 0.75, ...}, max_quote_chars=300)
        report = validator.validate(UnitType.FUNCTIONS, fn)
        if not report.valid:
            for e in report.errors:
                print(e.code, e.field, e.message)
    """

    def __init__(
        self,
        thresholds: dict[UnitType, float],
        max_quote_chars: int = DEFAULT_MAX_QUOTE_CHARS,
    ) -> None:
        self._thresholds = thresholds
        self._max_quote_chars = max_quote_chars

    # ------------------------------------------------------------------
    # Wspólne reguły
    # ------------------------------------------------------------------

    @staticmethod
    def _required(value: str, name: str, errors: list[ValidationError]) -> bool:
        if value and value.strip():
            return True
        errors.append(ValidationError(
            code=ErrorCode.FIELD_REQUIRED,
            field=name,
            message=f"Pole '{name}' jest wymagane",
        ))
        return False

    @staticmethod
    def _max_length(value: str, limit: int, name: str, errors: list[ValidationError]) -> None:
        if len(value) > limit:
            errors.append(ValidationError(
                code=ErrorCode.FIELD_TOO_LONG,
                field=name,
                message=f"Pole '{name}' przekracza {limit} znaków",
                value=len(value),
            ))

    def _common(
        self,
        unit_type: UnitType,
        unit: Unit,
        quoted_fields: list[tuple[str, str]],
        errors: list[ValidationError],
    ) -> None:
        if not unit.span_ids:
            errors.append(ValidationError(
                code=ErrorCode.SPAN_IDS_EMPTY,
                field="span_ids",
                message="Wymagany co najmniej jeden span_id (cytowanie źródła)",
            ))

        threshold = self._thresholds.get(unit_type, 0.0)
        if unit.confidence < threshold:
            errors.append(ValidationError(
                code=ErrorCode.CONFIDENCE_LOW,
                field="confidence",
                message=f"Confidence {unit.confidence} poniżej progu {threshold}",
                value=unit.confidence,
            ))

        for name, text in quoted_fields:
            if text and has_excessive_quotes(text, self._max_quote_chars):
                errors.append(ValidationError(
                    code=ErrorCode.EXCESSIVE_QUOTE,
                    field=name,
                    message=f"Tekst zawiera cytat dłuższy niż {self._max_quote_chars} znaków",
                    value=len(text),
                ))

    # ------------------------------------------------------------------
    # Reguły per typ
    # ------------------------------------------------------------------

    def validate_function(self, fn: FunctionDoc) -> ValidationReport:
        errors: list[ValidationError] = []
        self._required(fn.name, "name", errors)
        if self._required(fn.purpose, "purpose", errors):
            self._max_length(fn.purpose, MAX_PURPOSE_CHARS, "purpose", errors)

        if not fn.steps:
            errors.append(ValidationError(
                code=ErrorCode.STEPS_EMPTY,
                field="steps",
                message="Wymagany co najmniej jeden krok",
            ))
        else:
            numbers = sorted(s.n for s in fn.steps)
            if numbers != list(range(1, len(numbers) + 1)):
                errors.append(ValidationError(
                    code=ErrorCode.STEP_NUMBERING,
                    field="steps",
                    message="Numery kroków muszą tworzyć ciąg 1..N bez luk i powtórzeń",
                    value=numbers,
                ))
            for i, step in enumerate(fn.steps):
                if not (step.text and step.text.strip()):
                    errors.append(ValidationError(
                        code=ErrorCode.STEP_TEXT_EMPTY,
                        field=f"steps[{i}].text",
                        message="Tekst kroku nie może być pusty",
                    ))

        quoted = [("name", fn.name), ("purpose", fn.purpose)]
        quoted += [(f"preconditions[{i}]", t) for i, t in enumerate(fn.preconditions)]
        quoted += [(f"failure_modes[{i}]", t) for i, t in enumerate(fn.failure_modes)]
        quoted += [(f"steps[{i}].text", s.text) for i, s in enumerate(fn.steps)]
        self._common(UnitType.FUNCTIONS, fn, quoted, errors)
        return ValidationReport(errors)

    def validate_claim(self, claim: Claim) -> ValidationReport:
        errors: list[ValidationError] = []
        fields = [("subject", claim.subject), ("predicate", claim.predicate), ("object", claim.object)]
        for name, value in fields:
            self._required(value, name, errors)
        self._common(UnitType.CLAIMS, claim, fields, errors)
        return ValidationReport(errors)

    def validate_definition(self, definition: Definition) -> ValidationReport:
        errors: list[ValidationError] = []
        if self._required(definition.term, "term", errors):
            self._max_length(definition.term, MAX_TERM_CHARS, "term", errors)
        self._required(definition.definition, "definition", errors)

        quoted = [("term", definition.term), ("definition", definition.definition)]
        quoted += [(f"aliases[{i}]", a) for i, a in enumerate(definition.aliases)]
        self._common(UnitType.DEFINITIONS, definition, quoted, errors)
        return ValidationReport(errors)

    def validate_formula(self, formula: Formula) -> ValidationReport:
        errors: list[ValidationError] = []
        self._required(formula.name, "name", errors)
        self._required(formula.expression, "expression", errors)

        quoted = [("name", formula.name), ("expression", formula.expression)]
        quoted += [(f"notes[{i}]", n) for i, n in enumerate(formula.notes)]
        self._common(UnitType.FORMULAS, formula, quoted, errors)
        return ValidationReport(errors)

    def validate(self, unit_type: UnitType, unit: Unit) -> ValidationReport:
        match unit_type:
            case UnitType.FUNCTIONS:
                return self.validate_function(unit)
            case UnitType.CLAIMS:
                return self.validate_claim(unit)
            case UnitType.DEFINITIONS:
                return self.validate_definition(unit)
            case UnitType.FORMULAS:
                return self.validate_formula(unit)
        raise ValueError(f"Nieznany typ jednostki: {unit_type}")


def validate_batch(
    validator: UnitValidator,
    unit_type: UnitType,
    units: list[Unit],
    known_span_ids: set[str] | None = None,
) -> list[tuple[Unit, ValidationReport]]:
    """
    Waliduje listę jednostek; zwraca pary (jednostka, raport) w kolejności wejścia.

    Tryb ścisły / łagodny wybiera wywołujący (np. przerwanie przy pierwszym
    niepoprawnym raporcie albo pominięcie niepoprawnych jednostek).
    """
    results: list[tuple[Unit, ValidationReport]] = []
    for unit in units:
        report = validator.validate(unit_type, unit)
        if known_span_ids is not None:
            report = report.extend(validate_span_ids(unit.span_ids, known_span_ids))
        results.append((unit, report))
    return results
