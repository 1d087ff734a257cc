"""
Testy walidatora jednostek: numeracja kroków, pola wymagane, progi,
istnienie span_ids i limit długości cytatów.
"""

import pytest

from data_model.units import Claim, Definition, Formula, FunctionDoc, FunctionStep, UnitType
from extraction.orchestrator import DEFAULT_THRESHOLDS
from validator import (
    ErrorCode,
    UnitValidator,
    ValidationReport,
    has_excessive_quotes,
    validate_batch,
    validate_span_ids,
)


@pytest.fixture
def validator():
    return UnitValidator(DEFAULT_THRESHOLDS, max_quote_chars=20)


def _function(numbers=(1, 2, 3), **kw):
    return FunctionDoc(
        name=kw.pop("name", "Recognise revenue"),
        purpose=kw.pop("purpose", "Apply the five-step model."),
        steps=[FunctionStep(n, f"step {n}") for n in numbers],
        span_ids=kw.pop("span_ids", ["s1"]),
        confidence=kw.pop("confidence", 0.9),
        **kw,
    )


def _codes(report):
    return [e.code for e in report.errors]


class TestStepNumbering:
    """Kroki n = 1..N bez luk i powtórzeń, kolejność wejścia dowolna."""

    @pytest.mark.parametrize("numbers", [(1, 2, 3, 4, 5), (5, 3, 1, 2, 4), (1,)])
    def test_valid(self, validator, numbers):
        assert validator.validate_function(_function(numbers)).valid

    @pytest.mark.parametrize("numbers", [(1, 3, 5), (1, 2, 2), (0, 1, 2), (2, 3)])
    def test_invalid(self, validator, numbers):
        report = validator.validate_function(_function(numbers))
        assert _codes(report) == [ErrorCode.STEP_NUMBERING]
        assert report.errors[0].value == sorted(numbers)

    def test_no_steps(self, validator):
        assert _codes(validator.validate_function(_function(()))) == [ErrorCode.STEPS_EMPTY]

    def test_empty_step_text(self, validator):
        fn = _function((1, 2))
        fn.steps[1].text = "  "
        report = validator.validate_function(fn)
        assert _codes(report) == [ErrorCode.STEP_TEXT_EMPTY]
        assert report.errors[0].field == "steps[1].text"


class TestRequiredFields:

    def test_function_fields(self, validator):
        report = validator.validate_function(_function(name="", purpose="x" * 401))
        assert {(e.code, e.field) for e in report.errors} == {
            (ErrorCode.FIELD_REQUIRED, "name"),
            (ErrorCode.FIELD_TOO_LONG, "purpose"),
        }

    def test_claim_fields(self, validator):
        claim = Claim(subject="Revenue", predicate=" ", object="", span_ids=["s1"], confidence=0.9)
        report = validator.validate_claim(claim)
        assert [e.field for e in report.errors] == ["predicate", "object"]

    def test_definition_term_length(self, validator):
        d = Definition(term="t" * 121, definition="A resource.", span_ids=["s1"], confidence=0.9)
        assert _codes(validator.validate_definition(d)) == [ErrorCode.FIELD_TOO_LONG]

    def test_formula_fields(self, validator):
        f = Formula(name="ROA", expression="", span_ids=["s1"], confidence=0.9)
        assert [e.field for e in validator.validate_formula(f).errors] == ["expression"]


class TestThresholdsAndSpans:

    def test_confidence_threshold_per_type(self, validator):
        d = Definition(term="Asset", definition="A resource.", span_ids=["s1"], confidence=0.84)
        report = validator.validate(UnitType.DEFINITIONS, d)
        assert _codes(report) == [ErrorCode.CONFIDENCE_LOW]

        c = Claim(subject="a", predicate="b", object="c", span_ids=["s1"], confidence=0.84)
        assert validator.validate(UnitType.CLAIMS, c).valid

    def test_span_ids_required(self, validator):
        assert ErrorCode.SPAN_IDS_EMPTY in _codes(validator.validate_function(_function(span_ids=[])))

    def test_unknown_span_ids(self):
        report = validate_span_ids(["s1", "s9", "s8"], {"s1", "s2"})
        assert not report.valid
        assert report.errors[0].value == ["s9", "s8"]
        assert report.errors[0].message == "Nieznane span_ids: s9, s8"
        assert validate_span_ids(["s1"], {"s1"}).valid


class TestQuoteLimit:
    """Cytat (ze znakami cudzysłowu) dłuższy niż limit jest błędem."""

    def test_exact_limit_passes(self):
        quote = '"' + "x" * 18 + '"'
        assert len(quote) == 20
        assert not has_excessive_quotes(f"as stated {quote} here", 20)
        assert has_excessive_quotes('"' + "x" * 19 + '"', 20)

    def test_curly_quotes(self):
        assert has_excessive_quotes("“" + "x" * 30 + "”", 20)
        assert not has_excessive_quotes("“short”", 20)

    def test_unquoted_text_ignored(self):
        assert not has_excessive_quotes("x" * 500, 20)

    def test_validator_reports_field(self, validator):
        fn = _function(purpose='Apply "' + "x" * 40 + '" literally.')
        report = validator.validate_function(fn)
        assert _codes(report) == [ErrorCode.EXCESSIVE_QUOTE]
        assert report.errors[0].field == "purpose"

    def test_formula_notes_checked(self, validator):
        f = Formula(name="ROA", expression="a / b", span_ids=["s1"], confidence=0.9,
                    notes=["ok", '"' + "n" * 30 + '"'])
        report = validator.validate_formula(f)
        assert [e.field for e in report.errors] == ["notes[1]"]


class TestValidateBatch:

    def test_reports_in_input_order(self, validator):
        units = [_function(), _function((1, 3)), _function(span_ids=["s7"])]
        results = validate_batch(validator, UnitType.FUNCTIONS, units, known_span_ids={"s1"})
        assert [u is v for (u, _), v in zip(results, units)] == [True, True, True]
        assert [r.valid for _, r in results] == [True, False, False]
        assert _codes(results[2][1]) == [ErrorCode.SPAN_ID_UNKNOWN]

    def test_without_known_ids(self, validator):
        [(_, report)] = validate_batch(validator, UnitType.FUNCTIONS, [_function(span_ids=["s7"])])
        assert report.valid

    def test_report_extend(self):
        a = ValidationReport()
        b = validate_span_ids(["x"], set())
        assert a.valid
        assert not a.extend(b).valid
        assert a.errors == []
