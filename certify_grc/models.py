"""Core domain models for CertifyGRC"""

import base64
import copy
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple


class AssessmentError(Exception):
    """Base class for assessment errors"""


class ValidationError(AssessmentError):
    """A mandatory answer is missing from the in-progress record"""

    def __init__(self, section: "AssessmentSection"):
        self.section = section
        super().__init__(f"Please select REQS MET for {section.title}")


class PersistenceReadFailure(AssessmentError):
    """Stored submissions could not be decoded"""


class PersistenceWriteFailure(AssessmentError):
    """The submission store could not be written"""


class UnknownDomainError(AssessmentError, KeyError):
    """No assessment domain with the requested slug"""

    def __str__(self):
        return f"Unknown assessment domain: {self.args[0]}"


class UnknownLocationWarning(UserWarning):
    """A location outside the navigation table was visited"""


class RequirementsMet(Enum):
    """Answer to the REQS MET question of a section"""
    UNSET = ""
    YES = "yes"
    NO = "no"

    @classmethod
    def parse(cls, value) -> "RequirementsMet":
        """Accept an enum member, its value, or None for unset"""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNSET
        if not isinstance(value, str):
            raise ValueError(f"REQS MET must be text, got {type(value).__name__}")
        return cls(value.strip().lower())


class AnswerField(Enum):
    """Editable fields of a section answer"""
    REQUIREMENTS_MET = "reqsMet"
    COMMENTS = "comments"
    ACTION_NEEDED = "actionNeeded"
    ACTION_OWNER = "actionOwner"
    EVIDENCE_FILES = "evidenceFiles"

    @classmethod
    def parse(cls, value) -> "AnswerField":
        """Accept a member, its wire name or its attribute name"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            try:
                return cls[str(value).upper()]
            except KeyError:
                raise ValueError(f"Unknown answer field: {value!r}") from None


@dataclass(frozen=True)
class EvidenceFile:
    """An uploaded evidence file; the payload is kept as-is"""
    name: str
    data: bytes = b""
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        _, dot, ext = self.name.rpartition(".")
        return f".{ext.lower()}" if dot else ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "contentType": self.content_type,
            "size": self.size,
            "data": base64.b64encode(self.data).decode("ascii"),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EvidenceFile":
        return cls(
            name=data["name"],
            data=base64.b64decode(data.get("data") or ""),
            content_type=data.get("contentType"),
        )


def text_value(value, name: str) -> str:
    """Free-text answer; None clears it, anything but a string is rejected"""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{name} must be text, got {type(value).__name__}")
    return value


@dataclass
class SectionAnswer:
    """Mutable answer data for one assessment section"""
    requirements_met: RequirementsMet = RequirementsMet.UNSET
    comments: str = ""
    action_needed: str = ""
    action_owner: str = ""
    evidence_files: Tuple[EvidenceFile, ...] = ()

    def set_requirements_met(self, value) -> None:
        self.requirements_met = RequirementsMet.parse(value)

    def set_comments(self, value: Optional[str]) -> None:
        self.comments = text_value(value, "comments")

    def set_action_needed(self, value: Optional[str]) -> None:
        self.action_needed = text_value(value, "actionNeeded")

    def set_action_owner(self, value: Optional[str]) -> None:
        self.action_owner = text_value(value, "actionOwner")

    def set_evidence_files(self, files: Iterable[EvidenceFile]) -> None:
        """Replace the evidence list; re-uploading never appends"""
        try:
            files = tuple(files or ())
        except TypeError:
            raise ValueError("Evidence must be a list of uploaded files") from None
        for f in files:
            if not isinstance(f, EvidenceFile):
                raise ValueError(f"Evidence must be uploaded files, got {type(f).__name__}")
        self.evidence_files = files

    def set(self, answer_field: AnswerField, value) -> None:
        """Dispatch to the named setter for ``answer_field``"""
        setters = {
            AnswerField.REQUIREMENTS_MET: self.set_requirements_met,
            AnswerField.COMMENTS: self.set_comments,
            AnswerField.ACTION_NEEDED: self.set_action_needed,
            AnswerField.ACTION_OWNER: self.set_action_owner,
            AnswerField.EVIDENCE_FILES: self.set_evidence_files,
        }
        setters[answer_field](value)

    def copy(self) -> "SectionAnswer":
        return copy.copy(self)

    def to_dict(self) -> dict:
        return {
            "reqsMet": self.requirements_met.value,
            "comments": self.comments,
            "actionNeeded": self.action_needed,
            "actionOwner": self.action_owner,
            "evidenceFiles": [f.to_dict() for f in self.evidence_files],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SectionAnswer":
        return cls(
            requirements_met=RequirementsMet.parse(data.get("reqsMet")),
            comments=text_value(data.get("comments"), "comments"),
            action_needed=text_value(data.get("actionNeeded"), "actionNeeded"),
            action_owner=text_value(data.get("actionOwner"), "actionOwner"),
            evidence_files=tuple(
                EvidenceFile.from_dict(f) for f in data.get("evidenceFiles") or []
            ),
        )


@dataclass(frozen=True)
class AssessmentSection:
    """A fixed questionnaire item within an assessment domain"""
    key: str
    title: str
    question: str


@dataclass(frozen=True)
class AssessmentDomain:
    """A questionnaire (e.g. 4. Context of Organization) and its sections"""
    slug: str
    title: str
    storage_key: str
    form_view: str
    reports_view: str
    sections: Tuple[AssessmentSection, ...]

    def section(self, key: str) -> Optional[AssessmentSection]:
        for section in self.sections:
            if section.key == key:
                return section
        return None

    @property
    def section_keys(self) -> List[str]:
        return [section.key for section in self.sections]


class AssessmentForm:
    """The in-progress, editable record of one domain"""

    def __init__(self, domain: AssessmentDomain):
        self.domain = domain
        self.answers: Dict[str, SectionAnswer] = {
            section.key: SectionAnswer() for section in domain.sections
        }

    def answer(self, section_key: str) -> SectionAnswer:
        return self.answers[section_key]

    def is_blank(self) -> bool:
        return all(answer == SectionAnswer() for answer in self.answers.values())

    def to_dict(self) -> dict:
        return {key: answer.to_dict() for key, answer in self.answers.items()}


@dataclass(frozen=True)
class AssessmentSubmission:
    """A finalized, immutable set of section answers"""
    id: str
    submitted_at: datetime
    domain: str
    answers: Mapping[str, SectionAnswer] = field(default_factory=dict)

    def __post_init__(self):
        snapshot = {key: answer.copy() for key, answer in self.answers.items()}
        object.__setattr__(self, "answers", MappingProxyType(snapshot))

    def answer(self, section_key: str) -> SectionAnswer:
        return self.answers[section_key]

    def count(self, value: RequirementsMet) -> int:
        return sum(1 for a in self.answers.values() if a.requirements_met == value)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "submittedAt": self.submitted_at.isoformat(),
            "domain": self.domain,
            "sections": {key: answer.to_dict() for key, answer in self.answers.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AssessmentSubmission":
        """Decode a stored record, raising PersistenceReadFailure if malformed"""
        try:
            return cls(
                id=str(data["id"]),
                submitted_at=datetime.fromisoformat(data["submittedAt"]),
                domain=data.get("domain", ""),
                answers={
                    key: SectionAnswer.from_dict(value)
                    for key, value in data["sections"].items()
                },
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise PersistenceReadFailure(f"Malformed submission record: {e}") from e


class MissingFieldError(AssessmentError):
    """A required field of a register entry is empty"""

    def __init__(self, register_field: "RegisterField"):
        self.field = register_field
        super().__init__(f"{register_field.label} is required")


class UnknownRegisterError(AssessmentError, KeyError):
    """No register with the requested slug"""

    def __str__(self):
        return f"Unknown register: {self.args[0]}"


class FieldKind(Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"


@dataclass(frozen=True)
class RegisterField:
    """One input of a register form"""
    name: str
    label: str
    required: bool = False
    choices: Tuple[str, ...] = ()
    kind: FieldKind = FieldKind.TEXT

    def clean(self, value):
        """Normalize a submitted value, raising ValueError when it does not fit"""
        if value is None or value == "":
            return None if self.kind is not FieldKind.TEXT else ""
        if self.kind is FieldKind.NUMBER:
            if isinstance(value, bool):
                raise ValueError(f"{self.label} must be a number")
            try:
                return float(value)
            except (TypeError, ValueError):
                raise ValueError(f"{self.label} must be a number") from None
        if not isinstance(value, str):
            raise ValueError(f"{self.label} must be text, got {type(value).__name__}")
        value = value.strip()
        if self.kind is FieldKind.DATE:
            try:
                return date.fromisoformat(value[:10]).isoformat()
            except ValueError:
                raise ValueError(f"{self.label} must be a date (YYYY-MM-DD)") from None
        if self.choices and value not in self.choices:
            raise ValueError(f"{self.label} must be one of: {', '.join(self.choices)}")
        return value

    def is_empty(self, value) -> bool:
        return value is None or value == ""


@dataclass(frozen=True)
class Register:
    """A flat record form with its own storage key (risk, treatment, company)"""
    slug: str
    title: str
    storage_key: str
    fields: Tuple[RegisterField, ...]
    accepts_evidence: bool = True

    def field(self, name: str) -> Optional[RegisterField]:
        for register_field in self.fields:
            if register_field.name == name:
                return register_field
        return None

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def blank(self) -> Dict[str, object]:
        return {f.name: f.clean(None) for f in self.fields}


@dataclass(frozen=True)
class RegisterEntry:
    """A saved register record"""
    id: str
    created_at: datetime
    updated_at: datetime
    register: str
    values: Mapping[str, object] = field(default_factory=dict)
    evidence_files: Tuple[EvidenceFile, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(self, "evidence_files", tuple(self.evidence_files))

    def value(self, name: str):
        return self.values.get(name)

    def to_dict(self) -> dict:
        data = {"id": self.id}
        data.update(self.values)
        data["evidenceFiles"] = [f.to_dict() for f in self.evidence_files]
        data["createdAt"] = self.created_at.isoformat()
        data["updatedAt"] = self.updated_at.isoformat()
        return data

    @classmethod
    def decoder(cls, register: Register):
        """Build ``from_dict`` for entries of ``register``"""

        def from_dict(data: dict) -> "RegisterEntry":
            try:
                created_at = datetime.fromisoformat(data["createdAt"])
                return cls(
                    id=str(data["id"]),
                    created_at=created_at,
                    updated_at=datetime.fromisoformat(data.get("updatedAt") or data["createdAt"]),
                    register=register.slug,
                    values={f.name: f.clean(data.get(f.name)) for f in register.fields},
                    evidence_files=tuple(
                        EvidenceFile.from_dict(e) for e in data.get("evidenceFiles") or []
                    ),
                )
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise PersistenceReadFailure(f"Malformed {register.slug} record: {e}") from e

        return from_dict
