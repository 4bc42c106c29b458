"""Reports over saved records: search, filter, summary, Excel export"""

import io
from typing import Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .models import (
    AssessmentDomain, AssessmentSubmission, Register, RegisterEntry, RequirementsMet,
)


def _searchable_text(record: AssessmentSubmission) -> Iterable[str]:
    yield record.id
    yield record.submitted_at.isoformat()
    for answer in record.answers.values():
        yield answer.requirements_met.value
        yield answer.comments
        yield answer.action_needed
        yield answer.action_owner
        for evidence in answer.evidence_files:
            yield evidence.name


def search_submissions(records: Iterable[AssessmentSubmission],
                       term: Optional[str]) -> List[AssessmentSubmission]:
    """Case-insensitive substring search over ids, dates and answers"""
    term = (term or "").strip().lower()
    if not term:
        return list(records)
    return [
        record for record in records
        if any(term in text.lower() for text in _searchable_text(record))
    ]


def filter_submissions(records: Iterable[AssessmentSubmission],
                       requirements_met=None) -> List[AssessmentSubmission]:
    """Keep records where any section has the given REQS MET answer"""
    if requirements_met in (None, "", "all"):
        return list(records)
    wanted = RequirementsMet.parse(requirements_met)
    return [
        record for record in records
        if any(a.requirements_met == wanted for a in record.answers.values())
    ]


def summarize(domain: AssessmentDomain, records: List[AssessmentSubmission]) -> dict:
    """Per-section yes/no counts and the latest compliance rate"""
    sections = []
    for section in domain.sections:
        answers = [r.answers[section.key] for r in records if section.key in r.answers]
        sections.append({
            "key": section.key,
            "title": section.title,
            "yes": sum(1 for a in answers if a.requirements_met is RequirementsMet.YES),
            "no": sum(1 for a in answers if a.requirements_met is RequirementsMet.NO),
        })

    latest_rate = 0
    if records:
        latest = records[-1]
        total = len(latest.answers)
        latest_rate = (latest.count(RequirementsMet.YES) / total * 100) if total > 0 else 0

    return {
        "domain": domain.slug,
        "title": domain.title,
        "total_submissions": len(records),
        "latest_compliance_rate": latest_rate,
        "last_submitted_at": records[-1].submitted_at.isoformat() if records else None,
        "sections": sections,
    }


def _write_sheet(ws, headers: List[str], rows: Iterable[list]) -> None:
    """Styled header row, bordered data rows and a frozen header"""
    header_font = Font(bold=True, color='FFFFFF', size=11)
    header_fill = PatternFill(start_color='2563EB', end_color='2563EB', fill_type='solid')
    header_alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
    cell_alignment = Alignment(horizontal='left', vertical='center', wrap_text=True)
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment
        cell.border = thin_border
        ws.column_dimensions[get_column_letter(col)].width = 18 if col <= 2 else 28

    for row, values in enumerate(rows, 2):
        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.alignment = cell_alignment
            cell.border = thin_border


def _workbook_bytes(wb: Workbook) -> bytes:
    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def export_workbook(domain: AssessmentDomain, records: List[AssessmentSubmission]) -> bytes:
    """Build an .xlsx workbook with one row per submission"""
    wb = Workbook()
    ws = wb.active
    # Sheet titles are limited to 31 characters
    ws.title = domain.title[:31]

    headers = ['Submission Date', 'Record ID']
    for section in domain.sections:
        headers += [
            f'{section.title} - REQS MET',
            f'{section.title} - Comments',
            f'{section.title} - Action Needed',
            f'{section.title} - Action Owner',
            f'{section.title} - Evidence',
        ]

    rows = []
    for record in records:
        values = [record.submitted_at.strftime('%Y-%m-%d'), record.id]
        for section in domain.sections:
            answer = record.answers.get(section.key)
            if answer is None:
                values += [''] * 5
                continue
            values += [
                answer.requirements_met.value,
                answer.comments,
                answer.action_needed,
                answer.action_owner,
                ', '.join(f.name for f in answer.evidence_files),
            ]
        rows.append(values)

    _write_sheet(ws, headers, rows)
    ws.freeze_panes = 'C2'
    return _workbook_bytes(wb)


def export_register_workbook(register: Register, entries: List[RegisterEntry]) -> bytes:
    """Build an .xlsx workbook with one row per register entry"""
    wb = Workbook()
    ws = wb.active
    ws.title = register.title[:31]

    headers = ['Created At', 'ID'] + [f.label for f in register.fields]
    if register.accepts_evidence:
        headers.append('Evidence Files')

    rows = []
    for entry in entries:
        values = [entry.created_at.strftime('%Y-%m-%d'), entry.id]
        values += [entry.value(f.name) for f in register.fields]
        if register.accepts_evidence:
            values.append(', '.join(f.name for f in entry.evidence_files))
        rows.append(values)

    _write_sheet(ws, headers, rows)
    ws.freeze_panes = 'C2'
    return _workbook_bytes(wb)
