"""
Testy deduplikacji i wzbogacania jednostek dokumentu.
"""

from dataclasses import replace

import pytest

from data_model.units import Definition, Formula, FunctionDoc, FunctionStep
from dedup import (
    DedupSession,
    auto_tags,
    deduplicate_definitions,
    deduplicate_formulas,
    deduplicate_functions,
    enrich_definition,
    expression_hash,
    normalize_alias,
    normalize_aliases,
    slugify,
    steps_hash,
)

DOC = "doc-1"


def _definition(term="Contract asset", confidence=0.9, span_ids=("s1",), aliases=(), **kw):
    return Definition(
        term=term,
        definition=kw.pop("definition", "A right to consideration in exchange for goods."),
        span_ids=list(span_ids),
        confidence=confidence,
        aliases=list(aliases),
        **kw,
    )


def _function(name="Recognise revenue", confidence=0.8, steps=("Identify", "Allocate"), **kw):
    return FunctionDoc(
        name=name,
        purpose="Apply the model.",
        steps=[FunctionStep(i + 1, t) for i, t in enumerate(steps)],
        span_ids=["s1"],
        confidence=confidence,
        **kw,
    )


def _formula(expression="Gross Margin = Revenue - COGS", confidence=0.9, span_ids=("s1",), **kw):
    return Formula(
        name=kw.pop("name", "Gross margin"),
        expression=expression,
        span_ids=list(span_ids),
        confidence=confidence,
        **kw,
    )


class TestKeys:
    """Klucze kanoniczne: slug, aliasy, hashe treści."""

    @pytest.mark.parametrize("term, slug", [
        ("Contract Asset", "contract-asset"),
        ("Contract asset (IFRS 15)", "contract-asset-ifrs-15"),
        ("  Right-of-use   asset! ", "right-of-use-asset"),
    ])
    def test_slugify(self, term, slug):
        assert slugify(term) == slug

    def test_normalize_alias(self):
        assert normalize_alias("  E.B.I.T.D.A.,  adjusted ") == "ebitda adjusted"

    def test_normalize_aliases_unique_nonempty(self):
        assert normalize_aliases(["ROA", "roa!", "...", "Return on assets"]) == ["roa", "return on assets"]

    def test_steps_hash_depends_on_order_and_text(self):
        a = [FunctionStep(1, "A"), FunctionStep(2, "B")]
        b = [FunctionStep(1, "B"), FunctionStep(2, "A")]
        assert steps_hash(a) == steps_hash([FunctionStep(1, "A"), FunctionStep(2, "B")])
        assert steps_hash(a) != steps_hash(b)
        assert len(steps_hash(a)) == 16

    def test_expression_hash_ignores_case_and_whitespace(self):
        assert expression_hash("ROA = Net Income / Assets") == expression_hash("roa=net income/assets")
        assert expression_hash("a / b") != expression_hash("b / a")


class TestEnrichment:
    """Normalizacja aliasów i tagi słów kluczowych."""

    def test_auto_tags(self):
        assert auto_tags(["Gross margin"], []) == ["financial-metrics", "profitability"]
        assert auto_tags(["Revenue"], []) == ["financial-metrics"]
        assert auto_tags(["Lease term"], []) == []

    def test_tags_not_duplicated(self):
        assert auto_tags(["Profitable entity"], ["profitability", "custom"]) == ["profitability", "custom", "financial-metrics"]

    def test_enrich_definition_returns_copy(self):
        raw = _definition(term="Operating Margin", aliases=["Op. margin"])
        enriched = enrich_definition(raw, DOC)
        assert enriched.term_slug == "operating-margin"
        assert enriched.aliases_norm == ["op margin"]
        assert enriched.document_id == DOC
        assert "profitability" in enriched.tags
        assert raw.term_slug == "" and raw.tags == []

    def test_enrichment_idempotent(self):
        once = enrich_definition(_definition(term="Gross margin"), DOC)
        assert enrich_definition(once, DOC) == once


class TestDefinitionDedup:
    """Wyższe confidence wygrywa, remis scala."""

    def test_higher_confidence_wins(self):
        low = _definition(confidence=0.86, span_ids=["s1"])
        high = _definition(term="contract asset", confidence=0.95, span_ids=["s2"])
        [result] = deduplicate_definitions([low, high], DOC)
        assert result.confidence == 0.95
        assert result.span_ids == ["s2"]

        [result] = deduplicate_definitions([high, low], DOC)
        assert result.span_ids == ["s2"]

    def test_tie_merges(self):
        a = _definition(span_ids=["s1", "s2"], aliases=["CA"])
        b = _definition(term="Contract Asset", span_ids=["s2", "s3"], aliases=["ca", "Asset from contract"])
        [result] = deduplicate_definitions([a, b], DOC)
        assert set(result.span_ids) == {"s1", "s2", "s3"}
        assert len(result.span_ids) == 3
        assert set(result.aliases) == {"CA", "ca", "Asset from contract"}
        assert set(result.aliases_norm) == {"ca", "asset from contract"}
        assert len(result.aliases_norm) == 2

    def test_distinct_terms_kept_in_order(self):
        units = [_definition(term="Lease"), _definition(term="Asset"), _definition(term="lease")]
        assert [d.term_slug for d in deduplicate_definitions(units, DOC)] == ["lease", "asset"]

    def test_idempotent(self):
        units = [
            _definition(span_ids=["s1"], aliases=["CA"]),
            _definition(span_ids=["s2"], aliases=["C.A."]),
            _definition(term="Gross margin", confidence=0.87),
        ]
        once = deduplicate_definitions(units, DOC)
        assert deduplicate_definitions(once, DOC) == once

    def test_inputs_not_mutated(self):
        a = _definition(span_ids=["s1"])
        b = _definition(span_ids=["s2"])
        deduplicate_definitions([a, b], DOC)
        assert a.span_ids == ["s1"]
        assert a.term_slug == ""

    def test_sessions_are_independent(self):
        first = DedupSession(DOC)
        second = DedupSession(DOC)
        first.add_definitions([_definition()])
        assert second.definitions == []


class TestFunctionDedup:
    """Ta sama nazwa i kroki → ta sama procedura."""

    def test_strictly_higher_replaces(self):
        a = _function(confidence=0.8, tags=["first"])
        b = _function(confidence=0.9, tags=["second"])
        [result] = deduplicate_functions([a, b], DOC)
        assert result.tags == ["second"]

    def test_tie_keeps_first(self):
        a = _function(tags=["first"])
        b = _function(tags=["second"])
        [result] = deduplicate_functions([a, b], DOC)
        assert result.tags == ["first"]
        assert result.document_id == DOC

    def test_same_name_different_steps_kept(self):
        a = _function(steps=("Identify", "Allocate"))
        b = _function(steps=("Measure", "Recognise"))
        assert len(deduplicate_functions([a, b], DOC)) == 2


class TestFormulaDedup:
    """Bramki jakości, potem pierwszy widziany wygrywa."""

    def test_first_seen_wins_regardless_of_confidence(self):
        a = _formula(confidence=0.8, name="GM")
        b = _formula(expression="gross margin=revenue-cogs", confidence=0.99, name="Gross margin")
        [result] = deduplicate_formulas([a, b], DOC)
        assert result.name == "GM"

    def test_quality_gates(self):
        session = DedupSession(DOC)
        session.add_formulas([
            _formula(confidence=0.5),
            _formula(expression="a = b", span_ids=[]),
            _formula(expression="c = d", span_ids=["s1", "s2", "s3", "s4"]),
            _formula(expression="e = f", confidence=0.75),
        ])
        assert [f.expression for f in session.formulas] == ["e = f"]
        assert session.rejected_formulas == 3

    def test_custom_threshold(self):
        assert deduplicate_formulas([_formula(confidence=0.6)], DOC, threshold=0.5)

    def test_enriched_with_tags(self):
        [result] = deduplicate_formulas([_formula(name="ROA", expression="net income / total assets")], DOC)
        assert result.tags == ["financial-metrics"]
        assert result.document_id == DOC

    def test_formula_not_mutated(self):
        raw = _formula()
        deduplicate_formulas([raw], DOC)
        assert raw.tags == []
        assert replace(raw) == raw
