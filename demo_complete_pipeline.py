#!/usr/bin/env python3
"""
Complete Pipeline Demo: Types → Definition → Analysis → Diagrams → Run

Shows the full workflow:
1. Build a SurveyDefinition from the SandwichOrder dataclasses
2. Analyze the definition
3. Generate Graphviz diagrams
4. Run the survey with a scripted backend and rebuild the typed order
"""

from surveyform.analyzer import analyze_definition
from surveyform.backends import DotMode, ScriptedBackend, generate_dot, save_dot_file
from surveyform.builder import SurveyBuilder
from surveyform.config import configure_logging
from surveyform.examples import SandwichOrder
from surveyform.serialization import definition_to_yaml

SCRIPT = """
name: Sam
size: 6 inch ($7)
bread: Honey Oat
filling: Custom combo
filling.4.first.selected_variant: Turkey
filling.4.second.selected_variant: Bacon
toppings: [Lettuce, Tomato, Jalapeno]
toasted: yes
tip:
  attempts: ["-1", "1.5"]
"""


def main():
    configure_logging()

    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: Types → Definition → Analysis → Diagrams → Run")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Build definition
    # =========================================================================
    print("\n1. BUILDING DEFINITION...")
    survey = SurveyBuilder(SandwichOrder).suggest("notes", "Cut in half")
    definition = survey.definition()
    print(f"   ✓ Target: {definition.target.__name__}")
    print(f"   ✓ Root questions: {len(definition.questions)}")
    print(f"   ✓ Leaves: {len(definition.leaves())}")

    # =========================================================================
    # STEP 2: Analyze definition
    # =========================================================================
    print("\n2. ANALYZING DEFINITION...")
    report = analyze_definition(definition)
    print(f"   ✓ Kinds: {report.kind_counts}")
    print(f"   ✓ Max depth: {report.max_depth}")
    print(f"   ✓ Suggested sites: {report.suggested_sites}")
    print(f"   ✓ Validation coverage: {report.validation_coverage_percent:.1f}%")

    if report.warnings:
        print(f"\n   Warnings ({len(report.warnings)}):")
        for warning in report.warnings:
            print(f"      - {warning}")

    # =========================================================================
    # STEP 3: Generate diagrams
    # =========================================================================
    print("\n3. GENERATING DIAGRAMS...")
    for mode in DotMode:
        filename = f"sandwich_{mode.value}.dot"
        save_dot_file(definition, filename, mode=mode)
        print(f"   ✓ Saved {filename}")

    print("\n   Sample SIMPLE mode output:")
    print("-" * 80)
    lines = generate_dot(definition, mode=DotMode.SIMPLE).split("\n")
    for line in lines[:15]:
        print(f"   {line}")
    if len(lines) > 15:
        print(f"   ... ({len(lines) - 15} more lines)")

    # =========================================================================
    # STEP 4: Run the survey
    # =========================================================================
    print("\n4. RUNNING SURVEY...")
    backend = ScriptedBackend.from_yaml(SCRIPT)
    order = survey.run(backend)
    print(f"   ✓ Answered: {len(backend.asked)} questions")
    for path, raw, message in backend.rejections:
        print(f"   ✗ Rejected {raw!r} at {path}: {message}")
    print(f"   ✓ Order: {order}")

    # =========================================================================
    # STEP 5: Definition as YAML
    # =========================================================================
    print("\n5. DEFINITION AS YAML (first 20 lines):")
    print("-" * 80)
    for line in definition_to_yaml(definition).splitlines()[:20]:
        print(f"   {line}")

    print("\n" + "=" * 80)
    print("PIPELINE COMPLETE!")
    print("\nTo visualize the diagrams:")
    print("  dot -Tpng sandwich_simple.dot -o sandwich_simple.png")
    print("  dot -Tpng sandwich_clustered.dot -o sandwich_clustered.png")
    print("=" * 80)


if __name__ == "__main__":
    main()
