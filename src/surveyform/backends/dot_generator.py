"""
Graphviz DOT diagram generator for survey definitions.

Converts a SurveyDefinition into Graphviz DOT format for visualization.

Supports multiple modes:
    - SIMPLE: Question tree only (prompts and variants)
    - DETAILED: Kinds, bounds and suggested/assumed values on each node
    - CLUSTERED: Records and struct-like variants drawn as clusters
"""

from enum import Enum
from typing import List, Optional

from surveyform.model import (
    AllOfQuestion,
    AnyOfQuestion,
    FloatQuestion,
    IntQuestion,
    ListQuestion,
    MaskedQuestion,
    OneOfQuestion,
    Question,
    SurveyDefinition,
    Variant,
)
from surveyform.paths import ResponsePath


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"          # Just the question tree
    DETAILED = "detailed"      # Include kinds, bounds, defaults
    CLUSTERED = "clustered"    # Records as clusters


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    # Escape backslashes first
    s = s.replace('\\', '\\\\')
    s = s.replace('"', '\\"')
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _node_id(path: ResponsePath) -> str:
    return f'"q:{path}"' if not path.is_empty() else "START"


def _variant_id(path: ResponsePath, index: int) -> str:
    return f'"v:{path.child(index)}"'


def _bounds(minimum, maximum) -> Optional[str]:
    if minimum is None and maximum is None:
        return None
    low = "-inf" if minimum is None else minimum
    high = "inf" if maximum is None else maximum
    return f"[{low}, {high}]"


def _details(question: Question) -> List[str]:
    """Extra label lines for DETAILED mode."""
    kind = question.kind
    info = [kind.kind_name]
    if isinstance(kind, (IntQuestion, FloatQuestion, ListQuestion)):
        bounds = _bounds(kind.min, kind.max)
        if bounds:
            info.append(f"Bounds: {bounds}")
        if kind.width is not None:
            info.append(f"Width: {kind.width}")
    if isinstance(kind, ListQuestion) and (kind.min_items is not None or kind.max_items is not None):
        info.append(f"Items: {_bounds(kind.min_items, kind.max_items)}")
    if question.optional:
        info.append("Optional")
    if question.default.is_suggested:
        info.append(f"Suggested: {_default_text(question)}")
    elif question.default.is_assumed:
        info.append(f"Assumed: {_default_text(question)}")
    return info


def _default_text(question: Question) -> str:
    if isinstance(question.kind, MaskedQuestion):
        return "***"
    value = question.default.value
    text = str(getattr(value, "value", value))
    # Shorten for readability
    if len(text) > 40:
        text = text[:37] + "..."
    return text


class _DotWriter:
    def __init__(self, mode: DotMode):
        self.mode = mode
        self.lines: List[str] = []

    def emit(self, line: str, depth: int) -> None:
        self.lines.append("  " * depth + line)

    def question(self, question: Question, parent: str, depth: int) -> None:
        node = _node_id(question.path)
        label = question.ask or str(question.path)
        if self.mode == DotMode.DETAILED:
            label = "\n".join([label, f"({', '.join(_details(question))})"])
        kind = question.kind
        shape = "box" if question.is_leaf else "folder"
        fill = "lightgrey" if question.default.is_assumed else "lightblue"
        self.emit(f"{node} [label={_escape_dot_string(label)}, shape={shape}, fillcolor={fill}];", depth)
        self.emit(f"{parent} -> {node};", depth)

        if isinstance(kind, AllOfQuestion):
            self.children(kind.questions, node, depth, str(question.path), question.ask)
        elif isinstance(kind, (OneOfQuestion, AnyOfQuestion)):
            for index, variant in enumerate(kind.variants):
                self.variant(question, index, variant, node, depth)

    def variant(self, site: Question, index: int, variant: Variant, parent: str, depth: int) -> None:
        node = _variant_id(site.path, index)
        style = "dashed" if isinstance(site.kind, AnyOfQuestion) else "solid"
        attrs = [f"style={style}"]
        if self.mode == DotMode.DETAILED:
            attrs.append(f"label={_escape_dot_string(str(index))}")
        self.emit(f"{node} [label={_escape_dot_string(variant.label)}, shape=ellipse, fillcolor=lightyellow];", depth)
        self.emit(f"{parent} -> {node} [{', '.join(attrs)}];", depth)
        self.children(variant.questions(), node, depth, str(site.path.child(index)), variant.label)

    def children(self, questions: List[Question], parent: str, depth: int, cluster: str, title: str) -> None:
        if not questions:
            return
        if self.mode == DotMode.CLUSTERED:
            self.emit(f'subgraph "cluster_{cluster}" {{', depth)
            self.emit(f"label={_escape_dot_string(title)};", depth + 1)
            self.emit("style=filled;", depth + 1)
            self.emit("color=whitesmoke;", depth + 1)
            for question in questions:
                self.question(question, parent, depth + 1)
            self.emit("}", depth)
        else:
            for question in questions:
                self.question(question, parent, depth)


def generate_dot(definition: SurveyDefinition, mode: DotMode = DotMode.SIMPLE) -> str:
    """
    Generate Graphviz DOT format for a survey definition.

    Args:
        definition: SurveyDefinition to visualize
        mode: Visualization mode (SIMPLE, DETAILED, CLUSTERED)

    Returns:
        String containing DOT graph definition
    """
    writer = _DotWriter(mode)
    lines = writer.lines

    # Header
    lines.append("digraph survey {")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    title = definition.prelude or getattr(definition.target, "__name__", "START")
    lines.append(f"  START [shape=ellipse, fillcolor=lightgreen, label={_escape_dot_string(title)}];")

    for question in definition.questions:
        if question.path.is_empty():
            # A root union hangs its variants directly off START
            kind = question.kind
            if isinstance(kind, AllOfQuestion):
                writer.children(kind.questions, "START", 1, "root", question.ask)
            else:
                for index, variant in enumerate(kind.variants):
                    writer.variant(question, index, variant, "START", 1)
        else:
            writer.question(question, "START", 1)

    if definition.epilogue:
        lines.append(f"  END [shape=ellipse, fillcolor=lightgreen, label={_escape_dot_string(definition.epilogue)}];")

    # Footer
    lines.append("}")

    return "\n".join(lines)


def save_dot_file(definition: SurveyDefinition, filename: str, mode: DotMode = DotMode.SIMPLE) -> None:
    """
    Generate DOT and save to file.

    Args:
        definition: SurveyDefinition to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
    """
    dot = generate_dot(definition, mode=mode)
    with open(filename, 'w') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file"]
