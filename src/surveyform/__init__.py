"""
surveyform: typed, presentation-agnostic surveys.

A survey is declared once, as ordinary dataclasses, enums and tagged
unions. From that declaration the package derives a question tree, hands
it to any collection backend, and rebuilds a typed value from the answers.

ARCHITECTURAL GUARANTEE:
------------------------
The core (model, schema, validation, reconstruction) contains ZERO
knowledge of:
    - Terminals or prompt libraries
    - GUI toolkits
    - Document formats

Generation and reconstruction walk the same SurveyDefinition.
All surfaces consume the definition unchanged.
"""

__version__ = "0.1.0"
