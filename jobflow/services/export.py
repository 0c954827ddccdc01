"""
Export Service - render the current result set as CSV or a print document

Both exports take the already filtered and sorted jobs from the query
engine; nothing here filters or reorders.

CSV columns:
    Title, Company, Location, Salary From, Salary To, Employment Type,
    Job Category, Remote, Openings, Created At

The print document is a standalone HTML page carrying the applied filter
summary, the result count, a table of jobs and a total footer.
"""

import csv
import html
import io
from datetime import date
from typing import List, Optional, Sequence

from jobflow.schemas import FilterSpec, Job
from jobflow.services.formatting import format_salary, format_salary_range

CSV_HEADERS = [
    "Title",
    "Company",
    "Location",
    "Salary From",
    "Salary To",
    "Employment Type",
    "Job Category",
    "Remote",
    "Openings",
    "Created At",
]

PRINT_HEADERS = ["Title", "Company", "Location", "Salary", "Type", "Remote", "Openings"]


def _yes_no(job: Job) -> str:
    return "Yes" if job.is_remote_work == 1 else "No"


def to_csv(jobs: Sequence[Job]) -> str:
    """
    Serialize jobs as CSV text, one row per job, rows joined with "\\n".

    The header is written bare. In job rows every text column is quoted
    with embedded quotes doubled and numeric columns are written bare.
    """
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(CSV_HEADERS)

    rows = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for job in jobs:
        rows.writerow([
            job.title,
            job.company,
            job.location,
            job.salary_from,
            job.salary_to,
            job.employment_type,
            job.job_category,
            _yes_no(job),
            job.number_of_opening,
            job.created_at,
        ])

    # Drop the final terminator
    return buffer.getvalue()[:-1]


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"job_results_{today.isoformat()}.csv"


def active_filter_labels(spec: FilterSpec) -> List[str]:
    """Human-readable chip labels for every active constraint in spec."""
    labels = []
    if spec.search:
        labels.append(f'Search: "{spec.search}"')
    if spec.location:
        labels.append(f"Location: {spec.location}")
    if spec.job_category:
        labels.append(f"Category: {spec.job_category}")
    labels.extend(sorted(spec.employment_type))
    if spec.is_remote is True:
        labels.append("Remote Only")
    elif spec.is_remote is False:
        labels.append("On-site Only")
    if spec.salary_min is not None:
        labels.append(f"Min Salary: {format_salary(spec.salary_min)}")
    if spec.salary_max is not None:
        labels.append(f"Max Salary: {format_salary(spec.salary_max)}")
    if spec.min_openings is not None:
        labels.append(f"Min Openings: {spec.min_openings}")
    if spec.created_within is not None:
        labels.append(f"Last {spec.created_within} days")
    return labels


def filter_summary(spec: FilterSpec) -> str:
    if spec.is_neutral:
        return "None"
    return ", ".join(active_filter_labels(spec))


def _total_label(count: int) -> str:
    return f"Total: {count} job{'' if count == 1 else 's'}"


def render_print_document(jobs: Sequence[Job], spec: FilterSpec, title: str = "Job Listings") -> str:
    """
    Build the printable HTML document for the current results.

    Args:
        jobs: Filtered and sorted jobs
        spec: FilterSpec that produced them (rendered as a summary line)
        title: Document and footer title

    Returns:
        Complete HTML page as a string
    """
    esc = html.escape
    head_cells = "".join(f"<th>{esc(h)}</th>" for h in PRINT_HEADERS)
    rows = []
    for job in jobs:
        cells = [
            job.title,
            job.company,
            job.location,
            format_salary_range(job.salary_from, job.salary_to),
            job.employment_type,
            _yes_no(job),
            str(job.number_of_opening),
        ]
        rows.append("<tr>" + "".join(f"<td>{esc(c)}</td>" for c in cells) + "</tr>")

    return f"""<html><head><title>{esc(title)}</title>
<style>
  body {{ font-family: -apple-system, 'Segoe UI', sans-serif; color: #1a1a2e; margin: 0; }}
  .page-wrapper {{ padding: 30px 36px; }}
  .pdf-header {{ display: flex; justify-content: space-between; border-bottom: 2px solid #e5e7eb; }}
  .pdf-header-right {{ font-size: 12px; color: #6b7280; text-align: right; }}
  table {{ width: 100%; border-collapse: collapse; margin-top: 8px; }}
  th {{ text-align: left; padding: 8px 10px; background: #f3f4f6; font-size: 12px; }}
  td {{ font-size: 12px; padding: 6px 10px; border-bottom: 1px solid #e5e7eb; }}
  .pdf-footer {{ margin-top: 16px; border-top: 2px solid #e5e7eb; display: flex; justify-content: space-between; }}
</style>
</head><body>
<div class="page-wrapper">
<div class="pdf-header">
<span class="pdf-brand">JobFlow</span>
<div class="pdf-header-right">
<div><strong>Applied Filters:</strong> {esc(filter_summary(spec))}</div>
<div>Total Results: {len(jobs)}</div>
</div>
</div>
<table>
<thead><tr>{head_cells}</tr></thead>
<tbody>{"".join(rows)}</tbody>
</table>
<div class="pdf-footer">
<span class="pdf-footer-title">{esc(title)}</span>
<span>{_total_label(len(jobs))}</span>
</div>
</div>
</body></html>
"""
