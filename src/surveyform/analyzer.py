"""
Definition Analyzer: early diagnostics and inventory of survey definitions.

This module provides lightweight analysis of SurveyDefinition objects:
    - Question inventory by kind
    - Nesting depth and union fan-out
    - Override coverage (suggested / assumed sites)
    - Validation coverage and unbounded numeric inputs
    - Duplicate path detection

IMPORTANT: This is a read-only consumer. It does NOT modify the definition.
It only produces reports.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

from surveyform.model import (
    AllOfQuestion,
    AnyOfQuestion,
    FloatQuestion,
    IntQuestion,
    ListElementKind,
    ListQuestion,
    OneOfQuestion,
    SurveyDefinition,
)
from surveyform.paths import ResponsePath


def find_duplicate_paths(definition: SurveyDefinition) -> List[ResponsePath]:
    """Paths used by more than one question or selection site, sorted."""
    counts: Counter = Counter()
    for question in definition.iter_questions():
        counts[question.path] += 1
        if question.selection_path is not None:
            counts[question.selection_path] += 1
    return sorted(path for path, count in counts.items() if count > 1)


@dataclass
class DefinitionReport:
    """Comprehensive analysis report for a survey definition."""

    survey_name: str
    total_questions: int = 0
    total_leaves: int = 0
    total_records: int = 0
    total_one_of: int = 0
    total_any_of: int = 0
    total_variants: int = 0

    # Structure
    kind_counts: Dict[str, int] = field(default_factory=dict)
    max_depth: int = 0
    max_variants_per_site: int = 0

    # Overrides
    suggested_sites: List[str] = field(default_factory=list)
    assumed_sites: List[str] = field(default_factory=list)

    # Coverage
    optional_leaves: List[str] = field(default_factory=list)
    unbounded_numeric: List[str] = field(default_factory=list)
    leaves_with_validators: int = 0
    validation_coverage_percent: float = 0.0

    duplicate_paths: List[str] = field(default_factory=list)

    # Warnings and flags
    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_definition(definition: SurveyDefinition) -> DefinitionReport:
    """
    Perform comprehensive analysis of a SurveyDefinition.

    Checks for:
    - Question counts per kind
    - Nesting depth and variant fan-out
    - Suggested and assumed sites
    - Numeric inputs without bounds
    - Duplicate paths

    Returns a DefinitionReport with metrics and warnings.
    """
    name = getattr(definition.target, "__name__", "survey")
    report = DefinitionReport(survey_name=name)
    kinds: Counter = Counter()

    # =========================================================================
    # 1. INVENTORY
    # =========================================================================

    for question in definition.iter_questions():
        kind = question.kind
        report.total_questions += 1
        kinds[kind.kind_name] += 1
        report.max_depth = max(report.max_depth, len(question.path))

        if question.is_leaf:
            report.total_leaves += 1
            if question.validators:
                report.leaves_with_validators += 1
            if question.optional:
                report.optional_leaves.append(str(question.path))

        if isinstance(kind, AllOfQuestion):
            report.total_records += 1
        elif isinstance(kind, (OneOfQuestion, AnyOfQuestion)):
            if isinstance(kind, OneOfQuestion):
                report.total_one_of += 1
            else:
                report.total_any_of += 1
            report.total_variants += len(kind.variants)
            report.max_variants_per_site = max(report.max_variants_per_site, len(kind.variants))

        # =====================================================================
        # 2. OVERRIDES AND BOUNDS
        # =====================================================================

        if question.default.is_suggested:
            report.suggested_sites.append(str(question.path))
        elif question.default.is_assumed:
            report.assumed_sites.append(str(question.path))

        if isinstance(kind, (IntQuestion, FloatQuestion, ListQuestion)):
            numeric = not isinstance(kind, ListQuestion) or kind.element_kind is not ListElementKind.STRING
            if numeric and kind.min is None and kind.max is None:
                report.unbounded_numeric.append(str(question.path))

    report.kind_counts = dict(kinds)
    if report.total_leaves > 0:
        report.validation_coverage_percent = (report.leaves_with_validators / report.total_leaves) * 100

    report.duplicate_paths = [str(p) for p in find_duplicate_paths(definition)]

    # =========================================================================
    # 3. WARNING FLAGS
    # =========================================================================

    if report.duplicate_paths:
        report.add_warning(f"Duplicate paths: {', '.join(report.duplicate_paths)}")

    if report.unbounded_numeric:
        report.add_warning(f"Unbounded numeric inputs: {', '.join(report.unbounded_numeric)}")

    if report.total_leaves == 0:
        report.add_warning("Survey has no questions to ask")

    if report.assumed_sites and definition.visible().is_empty():
        report.add_warning("Every question is assumed: nothing will be shown")

    if report.max_depth > 5:
        report.add_warning(f"Deep nesting: max path depth {report.max_depth}")

    return report


__all__ = ["DefinitionReport", "analyze_definition", "find_duplicate_paths"]
