"""Reading the text, formatting and images of a Word document."""

from __future__ import annotations

import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

DOCUMENT_PART = "word/document.xml"
RELATIONSHIPS_PART = "word/_rels/document.xml.rels"

_HTML_TAGS = {
    "b": ("<b>", "</b>"),
    "i": ("<i>", "</i>"),
    "u": ("<u>", "</u>"),
    "shd": ("<mark>", "</mark>"),
}


class InvalidDocxError(ValueError):
    """Raised when a file is not a readable Word document."""

    def __init__(self, message: str = "invalid docx file") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Property:
    """One run property element, such as ``b`` or ``shd``."""

    name: str
    val: str | None = None
    fill: str | None = None

    def is_active(self) -> bool:
        """Whether the property switches its formatting on."""
        if self.val is None:
            return True
        if self.fill == "auto":
            return False
        return self.val != "false"


@dataclass
class Run:
    """A run of text: its text, its properties and the images it embeds."""

    text: str | None = None
    properties: tuple[Property, ...] = ()
    drawings: tuple[str, ...] = ()


@dataclass
class Document:
    """The paragraphs of a document body, each a list of runs."""

    paragraphs: list[list[Run]] = field(default_factory=list)


def _local(name: str) -> str:
    return name.rsplit("}", 1)[-1]


def _child(element: ET.Element | None, name: str) -> ET.Element | None:
    if element is None:
        return None
    return next((c for c in element if _local(c.tag) == name), None)


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [c for c in element if _local(c.tag) == name]


def _attr(element: ET.Element, name: str) -> str | None:
    return next((v for k, v in element.attrib.items() if _local(k) == name), None)


def _chardata(element: ET.Element) -> str:
    return "".join([element.text or ""] + [c.tail or "" for c in element])


def _container_embed(container: ET.Element) -> str:
    blip = container
    for name in ("graphic", "graphicData", "pic", "blipFill", "blip"):
        blip = _child(blip, name)
        if blip is None:
            return ""
    return _attr(blip, "embed") or ""


def _drawing_embed(drawing: ET.Element) -> str:
    for name in ("anchor", "inline"):
        container = _child(drawing, name)
        if container is not None:
            embed = _container_embed(container)
            if embed:
                return embed
    return ""


def _parse_run(element: ET.Element) -> Run:
    texts = _children(element, "t")
    rpr = _child(element, "rPr")
    properties: tuple[Property, ...] = ()
    if rpr is not None:
        properties = tuple(
            Property(_local(p.tag), _attr(p, "val"), _attr(p, "fill")) for p in rpr
        )
    return Run(
        text=_chardata(texts[-1]) if texts else None,
        properties=properties,
        drawings=tuple(_drawing_embed(d) for d in _children(element, "drawing")),
    )


def apply_properties(properties, text: str) -> str:
    """Wrap ``text`` in the HTML tags of its active properties."""
    for prop in properties or ():
        if prop.is_active() and prop.name in _HTML_TAGS:
            opening, closing = _HTML_TAGS[prop.name]
            text = opening + text + closing
    return text


def read_archive_member(path, name: str) -> bytes:
    """Return the bytes of archive member ``name``, or ``b""`` if it is absent."""
    with zipfile.ZipFile(path) as archive:
        try:
            return archive.read(name)
        except KeyError:
            return b""


def parse_document(path) -> Document:
    """Parse the main document part of the Word file at ``path``."""
    try:
        data = read_archive_member(path, DOCUMENT_PART)
    except (OSError, zipfile.BadZipFile) as exc:
        raise InvalidDocxError() from exc
    if not data:
        raise InvalidDocxError()
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise InvalidDocxError() from exc
    if _local(root.tag) != "document":
        raise InvalidDocxError()
    body = _child(root, "body")
    if body is None:
        return Document()
    return Document(
        [[_parse_run(r) for r in _children(p, "r")] for p in _children(body, "p")]
    )


def get_relationships(path) -> dict[str, str]:
    """Map relationship ids to their targets; empty when they cannot be read."""
    try:
        content = read_archive_member(path, RELATIONSHIPS_PART)
        root = ET.fromstring(content)
    except (OSError, zipfile.BadZipFile, ET.ParseError):
        return {}
    if _local(root.tag) != "Relationships":
        return {}
    return {
        _attr(rel, "Id") or "": _attr(rel, "Target") or ""
        for rel in _children(root, "Relationship")
    }


def is_media_file(name: str) -> bool:
    """Whether an archive member lies under ``word/media``."""
    parts = name.split("/")
    return len(parts) > 1 and parts[0] == "word" and parts[1] == "media"


def extract_media(path, outdir) -> list[Path]:
    """Write every media file of the document into ``outdir``; return their paths."""
    written = []
    with zipfile.ZipFile(path) as archive:
        for info in archive.infolist():
            if info.is_dir() or not is_media_file(info.filename):
                continue
            target = Path(outdir) / info.filename.split("/")[-1]
            target.write_bytes(archive.read(info))
            written.append(target)
    return written


def document_to_html(path) -> str:
    """Render the document as a simple HTML body."""
    document = parse_document(path)
    targets = get_relationships(path)
    output = []
    for paragraph in document.paragraphs:
        has_text = False
        for run in paragraph:
            if run.drawings:
                has_text = True
                output.extend(f'<img src="./{targets.get(rid, "")}">' for rid in run.drawings)
            elif run.text is not None:
                has_text = True
                output.append("<label>" + apply_properties(run.properties, run.text) + "</label>")
        if has_text:
            output.append("\n<br>\n")
    return "<body>\n" + "".join(output) + "</body>"