import zipfile

import pytest

from douquiz.document import (
    Document,
    InvalidDocxError,
    Property,
    Run,
    apply_properties,
    document_to_html,
    extract_media,
    get_relationships,
    is_media_file,
    parse_document,
    read_archive_member,
)

NS = (
    'xmlns:w="urn:example:w" xmlns:wp="urn:example:wp" xmlns:a="urn:example:a" '
    'xmlns:pic="urn:example:pic" xmlns:r="urn:example:r"'
)

DRAWING = (
    "<w:drawing><wp:inline><a:graphic><a:graphicData><pic:pic><pic:blipFill>"
    '<a:blip r:embed="rId5"/></pic:blipFill></pic:pic></a:graphicData></a:graphic>'
    "</wp:inline></w:drawing>"
)

RELS = (
    '<Relationships xmlns="urn:example:rels">'
    '<Relationship Id="rId5" Target="media/image1.png"/>'
    "</Relationships>"
)


def make_docx(path, body, rels=RELS, media=None):
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("word/document.xml", f"<w:document {NS}><w:body>{body}</w:body></w:document>")
        if rels is not None:
            archive.writestr("word/_rels/document.xml.rels", rels)
        for name, data in (media or {}).items():
            archive.writestr("word/media/" + name, data)
    return path


@pytest.mark.parametrize(
    "prop, expected",
    [
        (Property("b"), True),
        (Property("b", val="false"), False),
        (Property("b", val="true"), True),
        (Property("shd", val="clear", fill="auto"), False),
        (Property("shd", val="clear", fill="FFFF00"), True),
        (Property("shd", fill="auto"), True),
    ],
)
def test_property_is_active(prop, expected):
    assert prop.is_active() is expected


def test_apply_properties_nests_in_order():
    assert apply_properties([Property("b"), Property("i")], "x") == "<i><b>x</b></i>"


def test_apply_properties_skips_inactive_and_unknown():
    props = [Property("b", val="false"), Property("rFonts"), Property("u", val="single")]
    assert apply_properties(props, "x") == "<u>x</u>"
    assert apply_properties(None, "x") == "x"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("word/media/image1.png", True),
        ("word/document.xml", False),
        ("media/image1.png", False),
        ("word", False),
    ],
)
def test_is_media_file(name, expected):
    assert is_media_file(name) is expected


def test_parse_document_runs(tmp_path):
    body = (
        '<w:p><w:r><w:rPr><w:b/><w:shd w:val="clear" w:fill="FFFF00"/></w:rPr><w:t>Hello</w:t></w:r>'
        f"<w:r>{DRAWING}</w:r></w:p>"
        "<w:p></w:p>"
    )
    doc = parse_document(make_docx(tmp_path / "a.docx", body))
    assert doc == Document(
        [
            [
                Run("Hello", (Property("b"), Property("shd", "clear", "FFFF00"))),
                Run(None, (), ("rId5",)),
            ],
            [],
        ]
    )


def test_parse_document_empty_text_element(tmp_path):
    doc = parse_document(make_docx(tmp_path / "a.docx", "<w:p><w:r><w:t/></w:r></w:p>"))
    assert doc.paragraphs[0][0].text == ""


def test_parse_document_not_zip(tmp_path):
    path = tmp_path / "bad.docx"
    path.write_bytes(b"plain text")
    with pytest.raises(InvalidDocxError, match="invalid docx file"):
        parse_document(path)


def test_parse_document_missing_part(tmp_path):
    path = tmp_path / "bad.docx"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("other.xml", "<x/>")
    with pytest.raises(InvalidDocxError):
        parse_document(path)


@pytest.mark.parametrize("content", ["<w:document", "<other/>"])
def test_parse_document_bad_xml(tmp_path, content):
    path = tmp_path / "bad.docx"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("word/document.xml", content)
    with pytest.raises(InvalidDocxError):
        parse_document(path)


def test_get_relationships(tmp_path):
    path = make_docx(tmp_path / "a.docx", "")
    assert get_relationships(path) == {"rId5": "media/image1.png"}


def test_get_relationships_missing(tmp_path):
    assert get_relationships(make_docx(tmp_path / "a.docx", "", rels=None)) == {}
    assert get_relationships(tmp_path / "nothing.docx") == {}


def test_read_archive_member(tmp_path):
    path = make_docx(tmp_path / "a.docx", "")
    assert read_archive_member(path, "word/_rels/document.xml.rels") == RELS.encode()
    assert read_archive_member(path, "absent.xml") == b""


def test_extract_media(tmp_path):
    path = make_docx(tmp_path / "a.docx", "", media={"image1.png": b"\x89PNG", "b.jpg": b"jpg"})
    out = tmp_path / "out"
    out.mkdir()
    written = extract_media(path, out)
    assert sorted(p.name for p in written) == ["b.jpg", "image1.png"]
    assert (out / "image1.png").read_bytes() == b"\x89PNG"
    assert (out / "b.jpg").read_bytes() == b"jpg"


def test_document_to_html(tmp_path):
    body = (
        '<w:p><w:r><w:rPr><w:b/></w:rPr><w:t>Hi</w:t></w:r></w:p>'
        "<w:p></w:p>"
        f"<w:p><w:r>{DRAWING}</w:r></w:p>"
    )
    html = document_to_html(make_docx(tmp_path / "a.docx", body))
    assert html == (
        "<body>\n<label><b>Hi</b></label>\n<br>\n"
        '<img src="./media/image1.png">\n<br>\n</body>'
    )


def test_document_to_html_invalid(tmp_path):
    path = tmp_path / "bad.docx"
    path.write_bytes(b"")
    with pytest.raises(InvalidDocxError):
        document_to_html(path)