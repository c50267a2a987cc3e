"""Lines of plain text with formatting spans attached by character position."""

from __future__ import annotations

import copy as _copy
from dataclasses import dataclass, field
from enum import IntEnum

from douquiz.document import Property, get_relationships, parse_document


class PropType(IntEnum):
    """Kinds of formatting a span can carry."""

    NONE = 0
    BOLD = 2
    MARKED = 3
    UNDERLINE = 4
    IMG_SOURCE = 5
    ITALIC = 6


@dataclass
class Prop:
    """One formatting item and its raw value."""

    type: PropType = PropType.NONE
    value: str = ""


@dataclass
class FluidProperty:
    """Formatting that opens at ``start`` and closes at ``end`` (character indices)."""

    start: int = 0
    end: int = 0
    props: list[Prop] = field(default_factory=list)


@dataclass
class FluidString:
    """A line of text together with its formatting spans."""

    text: str = ""
    properties: list[FluidProperty] = field(default_factory=list)

    def drop_first(self, n: int = 1) -> None:
        """Remove the first ``n`` characters, shifting the spans left."""
        if n <= 0:
            return
        self.text = self.text[n:]
        for prop in self.properties:
            prop.start = max(prop.start - n, 0)
            prop.end = max(prop.end - n, 0)

    def copy(self) -> FluidString:
        """Return an independent deep copy."""
        return _copy.deepcopy(self)


_VAL_TYPES = {"b": PropType.BOLD, "i": PropType.ITALIC, "u": PropType.UNDERLINE}

_HTML_TAGS = {
    PropType.BOLD: ("<b>", "</b>", "false"),
    PropType.ITALIC: ("<i>", "</i>", "false"),
    PropType.UNDERLINE: ("<u>", "</u>", "false"),
    PropType.MARKED: ("<mark>", "</mark>", "auto"),
}


def _to_prop(prop: Property) -> Prop:
    if prop.name in _VAL_TYPES:
        return Prop(_VAL_TYPES[prop.name], prop.val or "")
    if prop.name == "shd":
        return Prop(PropType.MARKED, prop.fill or "")
    return Prop()


def parse_to_fluid(path) -> list[FluidString]:
    """Turn each paragraph of the document into a line; every line ends with a space."""
    document = parse_document(path)
    targets = get_relationships(path)
    lines = []
    for paragraph in document.paragraphs:
        line = FluidString()
        for run in paragraph:
            for rid in run.drawings:
                position = len(line.text)
                line.properties.append(
                    FluidProperty(position, position, [Prop(PropType.IMG_SOURCE, targets.get(rid, ""))])
                )
            if run.text is not None:
                if run.properties:
                    start = len(line.text)
                    line.properties.append(
                        FluidProperty(start, start + len(run.text), [_to_prop(p) for p in run.properties])
                    )
                line.text += run.text
        line.text += " "
        lines.append(line)
    return lines


def _tags(prop: Prop, with_marks: bool) -> tuple[str, str] | None:
    spec = _HTML_TAGS.get(prop.type)
    if spec is None or (prop.type is PropType.MARKED and not with_marks):
        return None
    opening, closing, off_value = spec
    if prop.value == off_value:
        return None
    return opening, closing


def _render(line: FluidString, with_marks: bool) -> str:
    text = line.text or " "
    parts = []
    for position, char in enumerate(text):
        for span in line.properties:
            if span.start == position:
                for prop in span.props:
                    if prop.type is PropType.IMG_SOURCE:
                        parts.append(f'<img src="{prop.value}">')
                    tags = _tags(prop, with_marks)
                    if tags:
                        parts.append(tags[0])
            if span.end == position:
                for prop in span.props:
                    tags = _tags(prop, with_marks)
                    if tags:
                        parts.append(tags[1])
        parts.append(char)
    output = "".join(parts)
    if text.strip(" "):
        output = '<label class="ques_content">' + output + "</label>"
    return output


def fluid_to_html(line: FluidString) -> str:
    """Render a line as HTML, highlighting marked text."""
    return _render(line, with_marks=True)


def fluid_to_html_unmarked(line: FluidString) -> str:
    """Render a line as HTML without highlighting."""
    return _render(line, with_marks=False)