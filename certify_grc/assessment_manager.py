"""Assessment Manager - in-progress record, validation and submission history"""

from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from .logger import get_logger
from .models import (
    AnswerField, AssessmentDomain, AssessmentForm, AssessmentSubmission,
    EvidenceFile, PersistenceWriteFailure,
    RequirementsMet, ValidationError,
)
from .storage import RecordHistory, SubmissionStorage

logger = get_logger(__name__)

ACCEPTED_EVIDENCE_EXTENSIONS = (
    '.pdf', '.docx', '.xlsx', '.xls', '.jpg', '.jpeg', '.png', '.gif'
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def log_notification(title: str, message: str, category: str = 'info') -> None:
    logger.info("[%s] %s: %s", category, title, message)


class AssessmentManager:
    """Manages the in-progress record and submission store of one domain"""

    def __init__(self, domain: AssessmentDomain, storage: SubmissionStorage,
                 clock: Optional[Callable[[], datetime]] = None,
                 notify: Optional[Callable[[str, str, str], None]] = None):
        self.domain = domain
        self.storage = storage
        self.clock = clock if clock is not None else utc_now
        self.notify = notify if notify is not None else log_notification
        self.current = AssessmentForm(domain)
        self.history = RecordHistory(storage, domain.storage_key, AssessmentSubmission.from_dict)

    def reset(self) -> None:
        """Discard the in-progress record"""
        self.current = AssessmentForm(self.domain)

    def update_field(self, section_key: str, field, value) -> bool:
        """Set one field of one section; unknown sections are ignored"""
        answer_field = AnswerField.parse(field)
        if not isinstance(section_key, str) or section_key not in self.current.answers:
            logger.warning("Ignoring update of %r on %s: not a section",
                           section_key, self.domain.slug)
            return False
        if answer_field is AnswerField.EVIDENCE_FILES:
            self.set_evidence_files(section_key, value)
        else:
            self.current.answer(section_key).set(answer_field, value)
        return True

    def set_evidence_files(self, section_key: str,
                           files: Iterable[EvidenceFile]) -> List[EvidenceFile]:
        """Replace a section's evidence with the accepted files"""
        if not isinstance(section_key, str) or section_key not in self.current.answers:
            logger.warning("Ignoring evidence for %r on %s: not a section",
                           section_key, self.domain.slug)
            return []
        answer = self.current.answer(section_key)
        answer.set_evidence_files(files)
        accepted = [f for f in answer.evidence_files if f.extension in ACCEPTED_EVIDENCE_EXTENSIONS]
        rejected = [f.name for f in answer.evidence_files
                    if f.extension not in ACCEPTED_EVIDENCE_EXTENSIONS]
        if rejected:
            self.notify("Invalid file type",
                        f"Only PDF, DOCX, Excel and image files are accepted: "
                        f"{', '.join(rejected)}", 'warning')
        answer.set_evidence_files(accepted)
        return accepted

    def validate(self) -> None:
        """Raise ValidationError for the first section without REQS MET"""
        for section in self.domain.sections:
            if self.current.answer(section.key).requirements_met is RequirementsMet.UNSET:
                raise ValidationError(section)

    def list_submissions(self) -> List[AssessmentSubmission]:
        """Get the submission history in submission order"""
        return self.history.records()

    def submit(self) -> AssessmentSubmission:
        """Validate, append and persist the in-progress record, then reset it"""
        try:
            self.validate()
        except ValidationError as e:
            self.notify("Validation Error", str(e), 'error')
            raise

        submitted_at = self.clock()
        record = AssessmentSubmission(
            id=self.history.next_id(submitted_at),
            submitted_at=submitted_at,
            domain=self.domain.slug,
            answers=self.current.answers,
        )
        try:
            self.history.append(record)
        except PersistenceWriteFailure as e:
            logger.error("Saving %s failed: %s", self.domain.storage_key, e)
            self.notify("Error", "Failed to save assessment. Your answers were kept.", 'error')
            raise

        self.reset()
        logger.info("Saved %s submission %s", self.domain.slug, record.id)
        self.notify("Assessment Saved",
                    f"{self.domain.title} assessment has been saved successfully.",
                    'success')
        return record

    def get_submission(self, submission_id: str) -> Optional[AssessmentSubmission]:
        """Get a submission by ID"""
        for record in self.list_submissions():
            if record.id == submission_id:
                return record
        return None

    def latest_submission(self) -> Optional[AssessmentSubmission]:
        records = self.list_submissions()
        return records[-1] if records else None

    def compliance_status(self, submission: Optional[AssessmentSubmission] = None) -> dict:
        """Get compliance status of a submission (latest by default)"""
        submission = submission or self.latest_submission()
        if submission is None:
            return {"total": 0, "compliant": 0, "non_compliant": 0, "compliance_rate": 0}
        total = len(submission.answers)
        compliant = submission.count(RequirementsMet.YES)
        return {
            "total": total,
            "compliant": compliant,
            "non_compliant": total - compliant,
            "compliance_rate": (compliant / total * 100) if total > 0 else 0
        }
