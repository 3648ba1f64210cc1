#!/usr/bin/env python3
"""
Demo: Generate DOT diagrams for the JobApplication example survey.
"""

from surveyform.backends import DotMode, generate_dot, save_dot_file
from surveyform.builder import SurveyBuilder
from surveyform.examples import JobApplication


def main():
    definition = (
        SurveyBuilder(JobApplication)
        .assume_relocate(False)
        .suggest_work_style("Remote")
        .definition()
    )

    print(f"Survey: {definition.target.__name__}")
    print(f"Root questions: {len(definition.questions)}")
    print(f"Leaves: {len(definition.leaves())}")
    print()

    # Full tree, including the assumed relocate question
    for mode in DotMode:
        filename = f"job_application_{mode.value}.dot"
        save_dot_file(definition, filename, mode=mode)
        print(f"Saved {filename}")

    # What a collection backend actually sees
    save_dot_file(definition.visible(), "job_application_visible.dot", mode=DotMode.DETAILED)
    print("Saved job_application_visible.dot")

    print()
    print("Sample DETAILED output:")
    print("=" * 80)
    print("\n".join(generate_dot(definition, mode=DotMode.DETAILED).split("\n")[:25]))
    print("...")


if __name__ == "__main__":
    main()
