# douquiz

douquiz reads a quiz written in an ordinary Word document (`.docx`), turns
the questions in it into structured data, and packs the result into a
`.dou` archive: a zip file holding the questions, the images of the
document and a short description of the archive. Questions and images can
be encrypted with a short key. A small web application previews how a
document will be read.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Writing a question sheet

Each question starts on a paragraph beginning with `Câu` (any case,
leading spaces allowed), followed by anything (usually a number), an
optional section name in square brackets, and a colon:

```
Câu 1 [Algebra]: What is 2 + 2?
A. 3
B. 4
C. 5
D. 22
Câu 2: Write the year.
Đáp án: 2024
```

* Multiple-choice questions give their options on paragraphs starting with
  `A.`, `B.`, `C.` and `D.`. An option counts as correct when its paragraph
  carries a shading colour (anything other than `auto`).
* Short-answer questions have a line starting with `Đáp án:` (or
  `đáp án:`) instead of options; the first four characters after it,
  leading spaces skipped, are the expected answer.
* Further paragraphs before the options are added to the question text.
* Bold, italic, underlined and shaded text, and pictures, are turned into
  HTML.
* A question without a bracketed section name is filed under `NONE`.
* Reading stops at the first paragraph that does not open a question, so
  the document should begin with its first question.

## Command line

```
douquiz export quiz.docx quiz.dou --author Teacher --duration 1800 \
    --structure Algebra:1:1 --key secret
```

packs a document into an archive. Options:

* `--author NAME`: stored in the archive description.
* `--duration SECONDS`: test duration, `0` (the default) for no limit.
* `--structure STYPE:NUMBER:POINTS`: may be repeated; when given, the
  archive records how many questions of each section to show and what each
  is worth.
* `--key KEY`: encrypt questions and media with this key (at most 16
  bytes).

On failure the command prints `error: ...` and exits with status 1.

```
douquiz serve --root app --host localhost --port 8080
douquiz
```

start the web application; with no command it runs with these defaults.

## Using the library

```python
from douquiz.dou import TestStructure, export, open_dou

structure = [TestStructure("Algebra", 1, 1.0)]

export(
    "quiz.docx",   # source document
    "quiz.dou",    # archive to write
    "Teacher",     # author
    1800,          # test duration in seconds, 0 for no limit
    True,          # store the test structure
    structure,
    True,          # encrypt questions and media
    "secret",      # key, at most 16 bytes
)

quiz = open_dou("quiz.dou", "secret")
for group in quiz.data.questions:
    print(group.stype, len(group.questions))
image = quiz.open_media("media/image1.png")
```

An archive holds `data.json` (the questions grouped by section),
`info.json` (revision, author, whether it is encrypted and the SHA-256 of
the key) and one `/media/<name>` entry per image. Opening an encrypted
archive with the wrong key raises `douquiz.dou.KeyMismatchError`.

Lower-level pieces:

* `douquiz.document`: `parse_document`, `get_relationships`,
  `extract_media`, `document_to_html`; unreadable files raise
  `InvalidDocxError`.
* `douquiz.fluid`: `parse_to_fluid` reads a document into formatted lines
  (`FluidString`), rendered by `fluid_to_html` and
  `fluid_to_html_unmarked`.
* `douquiz.questions`: `parse_question` and `iter_questions` find the
  questions in those lines; `Question.to_dict` gives their JSON form.
* `douquiz.security`: AES-128-GCM `encrypt` and `decrypt`, and `hash_key`.

## The web application

`douquiz.webapp.create_app(root)` builds a Flask application and
`douquiz.webapp.run(root, host, port)` serves it. It serves files from the
folder `root`:

* `/Home`, `/LivePreview`, `/Export`: `frontend/<home|livePreview|export>/index.html`,
  and the files next to them under `/Home/<file>` and so on.
* `/favicon.ico`: `icon.ico`; `/media/<file>`: images extracted into `media/`.
* `/LivePreview/API/genJson`: takes `{"path": "..."}` naming a `.docx` on
  the server, extracts its images into `media/` and answers with
  `{"status", "error", "questions"}`.
* `/Export/API/genUUID` returns a new random id; `/Export/API/upload`
  stores the request body as `tests/<uuid>.dat`, the id taken from the
  `uuid` header.

## What it does not do

The package ships no front-end files; the pages above are empty until a
`frontend` folder is supplied. The web application does not export
archives (its `export` endpoint does nothing); use the `douquiz export`
command or `douquiz.dou.export`. There is no program for taking a test or
scoring answers from an archive.