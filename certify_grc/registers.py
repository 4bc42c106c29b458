"""Risk, treatment and organization registers.

Each register is a flat form whose saved entries are appended to one storage
key, the same way assessment submissions are.
"""

from collections import Counter
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from .assessment_manager import ACCEPTED_EVIDENCE_EXTENSIONS, log_notification, utc_now
from .logger import get_logger
from .models import (
    EvidenceFile, FieldKind, MissingFieldError, PersistenceWriteFailure, Register, RegisterEntry,
    RegisterField, UnknownRegisterError,
)
from .storage import RecordHistory, SubmissionStorage

logger = get_logger(__name__)

RISK_TYPES = (
    "Operational", "Strategic", "Compliance", "Financial", "Reputational", "Technology", "Legal",
)
RISK_LEVELS = ("low", "medium", "high")
TREATMENT_OPTIONS = ("avoid", "share", "accept", "modify")
ACTION_STATUSES = ("not-started", "in-progress", "completed", "rejected")

RISK_DESCRIPTIONS = Register(
    slug="risk-descriptions",
    title="Risk Descriptions",
    storage_key="riskDescriptions",
    fields=(
        RegisterField("riskOwner", "Risk Owner", required=True),
        RegisterField("assetGroup", "Asset Group", required=True),
        RegisterField("asset", "Asset", required=True),
        RegisterField("threat", "Threat", required=True),
        RegisterField("vulnerability", "Vulnerability", required=True),
        RegisterField("riskType", "Risk Type", required=True, choices=RISK_TYPES),
    ),
)

PRE_TREATMENT = Register(
    slug="pre-treatment",
    title="Pre-Treatment Assessments",
    storage_key="preTreatmentAssessments",
    fields=(
        RegisterField("existingControls", "Existing Controls", required=True),
        RegisterField("likelihoodPreTreatment", "Likelihood (Pre-Treatment)",
                      required=True, choices=RISK_LEVELS),
        RegisterField("likelihoodRationale", "Likelihood Rationale"),
        RegisterField("impactPreTreatment", "Impact (Pre-Treatment)",
                      required=True, choices=RISK_LEVELS),
        RegisterField("impactRationale", "Impact Rationale"),
    ),
)

POST_TREATMENT = Register(
    slug="post-treatment",
    title="Post-Treatment Assessments",
    storage_key="postTreatmentAssessments",
    fields=(
        RegisterField("existingControls", "Existing Controls", required=True),
        RegisterField("likelihoodPostTreatment", "Likelihood (Post-Treatment)",
                      required=True, choices=RISK_LEVELS),
        RegisterField("likelihoodRationalePostTreatment", "Likelihood Rationale"),
        RegisterField("impactPostTreatment", "Impact (Post-Treatment)",
                      required=True, choices=RISK_LEVELS),
        RegisterField("impactRationalePostTreatment", "Impact Rationale"),
        RegisterField("evidenceComment", "Evidence Comment"),
    ),
)

TREATMENT_PLANS = Register(
    slug="treatment-plans",
    title="Treatment Plans",
    storage_key="treatmentPlans",
    fields=(
        RegisterField("treatmentOption", "Treatment Option Chosen",
                      required=True, choices=TREATMENT_OPTIONS),
        RegisterField("proposedAction", "Proposed Treatment Action", required=True),
        RegisterField("controlReference", "Annex A / Control Reference"),
        RegisterField("treatmentCost", "Treatment Cost", kind=FieldKind.NUMBER),
        RegisterField("actionOwner", "Treatment Action Owner", required=True),
        RegisterField("actionTimescale", "Treatment Action Timescale", kind=FieldKind.DATE),
        RegisterField("actionStatus", "Treatment Action Status",
                      required=True, choices=ACTION_STATUSES),
        RegisterField("evidenceComment", "Evidence Comment"),
    ),
)

ORGANIZATIONS = Register(
    slug="organizations",
    title="Organizations",
    storage_key="companyDetails",
    fields=(
        RegisterField("organizationName", "Organization Name", required=True),
        RegisterField("riskOwner", "Risk Owner"),
        RegisterField("assetGroup", "Asset Group"),
        RegisterField("asset", "Asset"),
        RegisterField("description", "Description"),
        RegisterField("industry", "Industry"),
        RegisterField("organizationSize", "Organization Size", kind=FieldKind.NUMBER),
    ),
    accepts_evidence=False,
)

REGISTERS = (RISK_DESCRIPTIONS, PRE_TREATMENT, POST_TREATMENT, TREATMENT_PLANS, ORGANIZATIONS)

_BY_SLUG = {register.slug: register for register in REGISTERS}


def get_register(slug: str) -> Register:
    """Look up a register by slug; raises UnknownRegisterError"""
    try:
        return _BY_SLUG[slug]
    except (KeyError, TypeError):
        raise UnknownRegisterError(slug) from None


def risk_level(likelihood: Optional[str], impact: Optional[str]) -> Optional[str]:
    """The higher of two low/medium/high ratings"""
    rated = [v for v in (likelihood, impact) if v in RISK_LEVELS]
    if not rated:
        return None
    return max(rated, key=RISK_LEVELS.index)


class RegisterManager:
    """Draft entry and saved entries of one register"""

    def __init__(self, register: Register, storage: SubmissionStorage,
                 clock: Optional[Callable[[], datetime]] = None,
                 notify: Optional[Callable[[str, str, str], None]] = None):
        self.register = register
        self.clock = clock if clock is not None else utc_now
        self.notify = notify if notify is not None else log_notification
        self.history = RecordHistory(storage, register.storage_key,
                                     RegisterEntry.decoder(register))
        self.draft: Dict[str, object] = register.blank()
        self.evidence: List[EvidenceFile] = []

    def reset(self) -> None:
        """Discard the draft"""
        self.draft = self.register.blank()
        self.evidence = []

    def update_field(self, name, value) -> None:
        """Set one draft field; raises ValueError for unknown fields or bad values"""
        if not isinstance(name, str):
            raise ValueError(f"Unknown {self.register.slug} field: {name!r}")
        self.update({name: value})

    def update(self, values: dict) -> None:
        """Set several fields; nothing changes if any value is rejected"""
        cleaned = {}
        for name, value in values.items():
            register_field = self.register.field(name) if isinstance(name, str) else None
            if register_field is None:
                raise ValueError(f"Unknown {self.register.slug} field: {name!r}")
            cleaned[name] = register_field.clean(value)
        self.draft.update(cleaned)

    def set_evidence_files(self, files: Iterable[EvidenceFile]) -> List[EvidenceFile]:
        """Replace the draft's evidence with the accepted files"""
        if not self.register.accepts_evidence:
            raise ValueError(f"{self.register.title} do not take evidence files")
        files = list(files or [])
        accepted = [f for f in files if f.extension in ACCEPTED_EVIDENCE_EXTENSIONS]
        rejected = [f.name for f in files if f.extension not in ACCEPTED_EVIDENCE_EXTENSIONS]
        if rejected:
            self.notify("Invalid file type",
                        f"Please upload PDF, DOCX, Excel, or image files only: "
                        f"{', '.join(rejected)}", 'warning')
        self.evidence = accepted
        return accepted

    def validate(self) -> None:
        """Raise MissingFieldError for the first empty required field"""
        for register_field in self.register.fields:
            if register_field.required and register_field.is_empty(self.draft.get(register_field.name)):
                raise MissingFieldError(register_field)

    def submit(self) -> RegisterEntry:
        """Validate, append and persist the draft, then reset it"""
        try:
            self.validate()
        except MissingFieldError as e:
            self.notify("Validation Error", str(e), 'error')
            raise

        now = self.clock()
        entry = RegisterEntry(
            id=self.history.next_id(now),
            created_at=now,
            updated_at=now,
            register=self.register.slug,
            values=self.draft,
            evidence_files=tuple(self.evidence),
        )
        try:
            self.history.append(entry)
        except PersistenceWriteFailure as e:
            logger.error("Saving %s failed: %s", self.register.storage_key, e)
            self.notify("Error", f"Failed to save {self.register.title.lower()}.", 'error')
            raise

        self.reset()
        logger.info("Saved %s entry %s", self.register.slug, entry.id)
        self.notify("Success", f"{self.register.title} entry saved successfully", 'success')
        return entry

    def list_entries(self) -> List[RegisterEntry]:
        return self.history.records()

    def get_entry(self, entry_id: str) -> Optional[RegisterEntry]:
        for entry in self.list_entries():
            if entry.id == entry_id:
                return entry
        return None

    def delete_entry(self, entry_id: str) -> bool:
        """Remove a saved entry; False when there is none"""
        removed = self.history.remove(entry_id)
        if removed:
            self.notify("Success", f"{self.register.title} entry deleted successfully", 'success')
        return removed

    def search(self, term: Optional[str] = None, field_name: Optional[str] = None,
               value: Optional[str] = None) -> List[RegisterEntry]:
        """Case-insensitive text search, optionally keeping one field value"""
        term = (term or "").strip().lower()
        entries = self.list_entries()
        if term:
            entries = [
                e for e in entries
                if any(term in str(v).lower() for v in e.values.values() if v is not None)
                or any(term in f.name.lower() for f in e.evidence_files)
            ]
        if field_name and value not in (None, "", "all"):
            if self.register.field(field_name) is None:
                raise ValueError(f"Unknown {self.register.slug} field: {field_name!r}")
            entries = [e for e in entries if e.value(field_name) == value]
        return entries

    def counts_by(self, field_name: str) -> Dict[str, int]:
        """Number of entries per value of ``field_name``"""
        counts = Counter(e.value(field_name) for e in self.list_entries())
        counts.pop(None, None)
        counts.pop("", None)
        return dict(counts)
