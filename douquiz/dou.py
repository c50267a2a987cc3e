"""Packing quizzes from Word documents into ``.dou`` archives and reading them back."""

from __future__ import annotations

import json
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass, field

from douquiz.document import is_media_file, read_archive_member
from douquiz.fluid import parse_to_fluid
from douquiz.questions import ANSWER_SLOTS, Question, QuestionType, iter_questions
from douquiz.security import decrypt, encrypt, hash_key

DOU_REVISION_1 = 0xDEBE
KEY_MISMATCH = "ERROR_KEY_NOT_MATCH"
DATA_MEMBER = "data.json"
INFO_MEMBER = "info.json"
MEDIA_PREFIX = "/media/"


class KeyMismatchError(ValueError):
    """Raised when the key given does not open an encrypted archive."""

    def __init__(self) -> None:
        super().__init__(KEY_MISMATCH)


@dataclass
class TestStructure:
    """How many questions of a section type to show and what each is worth."""

    __test__ = False

    stype: str = ""
    number: int = 0
    points: float = 0.0


@dataclass
class DouQuestion:
    """The questions of one section type."""

    stype: str = ""
    questions: list[Question] = field(default_factory=list)


@dataclass
class DouData:
    """The test content stored in ``data.json``."""

    revision: int = 0
    test_duration: int = 0
    questions: list[DouQuestion] = field(default_factory=list)
    use_test_structure: bool = False
    test_structure: list[TestStructure] = field(default_factory=list)


@dataclass
class DouInfo:
    """The archive description stored in ``info.json``."""

    revision: int = 0
    author: str = ""
    encrypted: bool = False
    key: str = ""


@dataclass
class MediaData:
    """One media file of an archive."""

    name: str = ""
    data: bytes = b""


@dataclass
class DouFile:
    """An opened archive."""

    info: DouInfo = field(default_factory=DouInfo)
    data: DouData = field(default_factory=DouData)
    media: list[MediaData] = field(default_factory=list)

    def open_media(self, path: str) -> bytes:
        """Return the media at a relationship target such as ``media/image1.png``."""
        wanted = "/" + convert_path(path)
        return next((m.data for m in self.media if m.name == wanted), b"")


def convert_path(path: str) -> str:
    """Turn backslashes into forward slashes."""
    return path.replace("\\", "/")


def group_by_stype(questions: Iterable[Question]) -> list[DouQuestion]:
    """Group questions by section type, keeping the order types first appear in."""
    groups: dict[str, DouQuestion] = {}
    for question in questions:
        groups.setdefault(question.stype, DouQuestion(question.stype)).questions.append(question)
    return list(groups.values())


def _dumps(value) -> bytes:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _structure_to_dict(item: TestStructure) -> dict:
    return {"stype": item.stype, "number": item.number, "point": item.points}


def _structure_from_dict(raw: dict) -> TestStructure:
    return TestStructure(raw.get("stype", ""), raw.get("number", 0), raw.get("point", 0.0))


def _data_to_dict(data: DouData) -> dict:
    return {
        "revision": data.revision,
        "testDuration": data.test_duration,
        "questions": [
            {"stype": group.stype, "questions": [q.to_dict() for q in group.questions]}
            for group in data.questions
        ]
        or None,
        "useTestStructure": data.use_test_structure,
        "testStructure": [_structure_to_dict(s) for s in data.test_structure] or None,
    }


def _slots(values, default) -> list:
    items = list(values or ())[:ANSWER_SLOTS]
    return items + [default] * (ANSWER_SLOTS - len(items))


def _question_from_dict(raw: dict) -> Question:
    return Question(
        type=QuestionType(raw.get("type", 0)),
        stype=raw.get("stype", ""),
        content=raw.get("content", ""),
        answers=_slots(raw.get("answers"), ""),
        true_answers=_slots(raw.get("TNAnswers"), False),
        tln_answers=_slots(raw.get("TLNAnswers"), ""),
    )


def _object(raw, what: str) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"malformed {what}")
    return raw


def _data_from_dict(raw) -> DouData:
    raw = _object(raw, DATA_MEMBER)
    return DouData(
        revision=raw.get("revision", 0),
        test_duration=raw.get("testDuration", 0),
        questions=[
            DouQuestion(
                group.get("stype", ""),
                [_question_from_dict(q) for q in group.get("questions") or ()],
            )
            for group in raw.get("questions") or ()
        ],
        use_test_structure=bool(raw.get("useTestStructure", False)),
        test_structure=[_structure_from_dict(s) for s in raw.get("testStructure") or ()],
    )


def _info_from_dict(raw) -> DouInfo:
    raw = _object(raw, INFO_MEMBER)
    return DouInfo(
        revision=raw.get("revision", 0),
        author=raw.get("author", ""),
        encrypted=bool(raw.get("encrypted", False)),
        key=raw.get("key", ""),
    )


def export(
    source,
    output,
    author: str,
    test_duration: int = 0,
    use_test_structure: bool = False,
    test_structure: Iterable[TestStructure] = (),
    use_encryption: bool = False,
    key: str = "",
) -> None:
    """Read the quiz in the Word file ``source`` and write it as an archive to ``output``."""
    source = convert_path(str(source))
    output = convert_path(str(output))

    questions = list(iter_questions(parse_to_fluid(source)))
    data = DouData(
        revision=DOU_REVISION_1,
        test_duration=test_duration,
        questions=group_by_stype(questions),
        use_test_structure=use_test_structure,
        test_structure=list(test_structure) if use_test_structure else [],
    )

    def seal(payload: bytes) -> bytes:
        return encrypt(payload, key) if use_encryption else payload

    info = DouInfo(
        revision=DOU_REVISION_1,
        author=author,
        encrypted=use_encryption,
        key=hash_key(key) if use_encryption else "",
    )
    payload = seal(_dumps(_data_to_dict(data)))

    with zipfile.ZipFile(output, "w", zipfile.ZIP_DEFLATED) as archive, zipfile.ZipFile(source) as document:
        archive.writestr(DATA_MEMBER, payload)
        for member in document.infolist():
            if member.is_dir() or not is_media_file(member.filename):
                continue
            name = member.filename.split("/")[-1]
            archive.writestr(MEDIA_PREFIX + name, seal(document.read(member)))
        archive.writestr(
            INFO_MEMBER,
            _dumps(
                {
                    "revision": info.revision,
                    "author": info.author,
                    "encrypted": info.encrypted,
                    "key": info.key,
                }
            ),
        )


def _is_dou_media(name: str) -> bool:
    parts = convert_path(name).split("/")
    return len(parts) >= 2 and parts[-2] == "media"


def open_dou(path, key: str = "") -> DouFile:
    """Open an archive; encrypted archives need the key they were written with."""
    info = _info_from_dict(json.loads(read_archive_member(path, INFO_MEMBER)))
    if info.encrypted and info.key != hash_key(key):
        raise KeyMismatchError()

    payload = read_archive_member(path, DATA_MEMBER)
    if info.encrypted:
        payload = decrypt(payload, key)
    data = _data_from_dict(json.loads(payload))

    media = []
    with zipfile.ZipFile(path) as archive:
        for member in archive.infolist():
            if not _is_dou_media(member.filename):
                continue
            content = archive.read(member)
            if info.encrypted:
                try:
                    content = decrypt(content, key)
                except ValueError:
                    content = b""
            media.append(MediaData(convert_path(member.filename), content))

    return DouFile(info, data, media)