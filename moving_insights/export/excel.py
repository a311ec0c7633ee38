"""
Spreadsheet export of the raw collections and their financial summary.

One workbook per call, written to disk. Summary figures come from the same
aggregator the dashboard uses so the numbers agree with what was on screen.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font

from moving_insights.analysis.aggregator import MetricsAggregator
from moving_insights.analysis.breakdowns import source_performance
from moving_insights.analysis.fields import to_number
from moving_insights.models.records import (
    Client,
    Employee,
    Job,
    JobStatus,
    Lead,
    LeadStatus,
    TimeEntry,
    parse_records,
)

logger = logging.getLogger(__name__)

SHEET_TITLES = [
    "Financial Summary",
    "Revenue Analysis",
    "Jobs Details",
    "Leads Analysis",
    "Client Performance",
    "Payroll Details",
    "Expense Breakdown",
]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def _safe(text: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", text).strip("_")


def _money(value: Any) -> str:
    return f"${to_number(value):,.2f}"


def _day(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def _source_name(source: Optional[str]) -> str:
    return (source or "other").replace("_", " ").upper()


def _write_rows(sheet, rows: List[List[Any]], bold_rows: Iterable[int] = ()) -> None:
    for row in rows:
        sheet.append(row)
    for index in bold_rows:
        for cell in sheet[index + 1]:
            cell.font = Font(bold=True)


def _write_table(sheet, records: List[Dict[str, Any]]) -> None:
    """Header row from the first record's keys, then one row per record."""
    if not records:
        sheet.append(["No records"])
        return
    headers = list(records[0].keys())
    sheet.append(headers)
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for record in records:
        sheet.append([record.get(h) for h in headers])


def _summary_rows(jobs, leads, clients, time_entries, employees, label, now) -> List[List[Any]]:
    metrics = MetricsAggregator().aggregate(jobs, leads, clients, time_entries, employees)
    return [
        ["FINANCIAL SUMMARY", ""],
        ["Report Period:", label],
        ["Generated:", now.strftime("%Y-%m-%d %H:%M:%S")],
        [],
        ["REVENUE METRICS", ""],
        ["Total Revenue", _money(metrics.total_revenue)],
        ["Paid Revenue", _money(metrics.paid_revenue)],
        ["Unpaid Revenue", _money(metrics.unpaid_revenue)],
        ["Average Job Value", _money(metrics.average_job_value)],
        [],
        ["EXPENSE METRICS", ""],
        ["Labor Cost", _money(metrics.total_labor_cost)],
        ["Lead Costs (Completed Jobs)", _money(metrics.total_lead_cost)],
        ["Total Expenses", _money(metrics.total_expenses)],
        [],
        ["PROFITABILITY", ""],
        ["Net Profit", _money(metrics.net_profit)],
        ["Profit Margin", f"{metrics.profit_margin:.1f}%"],
        [],
        ["OPERATIONAL METRICS", ""],
        ["Total Jobs", metrics.total_jobs],
        ["Jobs Completed", metrics.completed_jobs],
        ["Jobs Cancelled", metrics.cancelled_jobs],
        ["Average Job Duration (h)", metrics.average_job_duration],
        ["Total Leads", metrics.total_leads],
        ["Converted Leads", metrics.converted_leads],
        ["Conversion Rate", f"{metrics.conversion_rate:.1f}%"],
        ["Repeat Customer Rate", f"{metrics.repeat_customer_rate:.1f}%"],
        ["Active Employees", metrics.employee_utilization],
    ]


def _revenue_rows(leads: List[Lead], jobs: List[Job]) -> List[List[Any]]:
    rows: List[List[Any]] = [
        ["REVENUE BY LEAD SOURCE", "", "", "", ""],
        ["Source", "Revenue", "Conversions", "Total Leads", "Conversion Rate"],
    ]
    for row in sorted(source_performance(leads, jobs), key=lambda r: r.revenue, reverse=True):
        rows.append([
            _source_name(row.source),
            _money(row.revenue),
            row.conversions,
            row.leads,
            f"{row.conversion_rate:.1f}%",
        ])
    return rows


def _job_records(jobs: List[Job]) -> List[Dict[str, Any]]:
    return [
        {
            "Job Number": job.job_number or job.id,
            "Client Name": job.client_name,
            "Client Phone": job.client_phone,
            "Job Date": _day(job.job_date),
            "Status": job.status,
            "Pricing Model": job.pricing_model,
            "Movers Needed": job.movers_needed,
            "Estimated Hours": job.estimated_duration_hours,
            "Actual Hours": job.actual_duration_hours,
            "Estimated Total": _money(job.estimated_total),
            "Actual Total": _money(job.actual_total),
            "Amount Received": _money(job.total_amount_received),
            "Lead Cost": _money(job.lead_cost),
            "Is Paid": "Yes" if job.is_paid else "No",
        }
        for job in jobs
    ]


def _lead_records(leads: List[Lead]) -> List[Dict[str, Any]]:
    return [
        {
            "Lead Name": lead.name,
            "Phone": lead.phone,
            "Email": lead.email or "N/A",
            "Source": _source_name(lead.source),
            "Status": (lead.status or "").upper(),
            "Lead Cost": _money(lead.lead_cost),
            "Estimated Value": _money(lead.estimated_value),
            "Created Date": _day(lead.created_at),
            "Notes": lead.notes or "None",
        }
        for lead in leads
    ]


def _client_records(clients: List[Client]) -> List[Dict[str, Any]]:
    return [
        {
            "Client Name": client.name,
            "Phone": client.phone,
            "Email": client.email or "N/A",
            "Company": client.company_name or "Individual",
            "Total Jobs Completed": int(to_number(client.total_jobs_completed)),
            "Total Revenue": _money(client.total_revenue),
            "Created Date": _day(client.created_at),
        }
        for client in clients
    ]


def _payroll_records(entries: List[TimeEntry], employees: List[Employee]) -> List[Dict[str, Any]]:
    by_id = {e.id: e for e in employees if e.id}
    rows = []
    for entry in entries:
        if not entry.is_paid:
            continue
        employee = by_id.get(entry.employee_id)
        rate = to_number(entry.hourly_rate)
        regular_pay = to_number(entry.regular_hours) * rate
        overtime_pay = to_number(entry.overtime_hours) * (to_number(entry.overtime_rate) or rate)
        tips = to_number(entry.tip_amount)
        rows.append({
            "Employee Name": employee.name if employee else "Unknown",
            "Employee Number": (employee.employee_number if employee else None) or "N/A",
            "Entry Date": _day(entry.entry_date),
            "Clock In": entry.clock_in_time.strftime("%H:%M") if entry.clock_in_time else "",
            "Clock Out": (
                entry.clock_out_time.strftime("%H:%M") if entry.clock_out_time else "Still Working"
            ),
            "Regular Hours": to_number(entry.regular_hours),
            "Overtime Hours": to_number(entry.overtime_hours),
            "Regular Pay": _money(regular_pay),
            "Overtime Pay": _money(overtime_pay),
            "Tips": _money(tips),
            "Total Pay": _money(to_number(entry.total_pay) or regular_pay + overtime_pay + tips),
        })
    return rows


def _expense_rows(leads: List[Lead], entries: List[TimeEntry]) -> List[List[Any]]:
    lead_costs: Dict[str, float] = {}
    for lead in leads:
        source = lead.source or "other"
        lead_costs[source] = lead_costs.get(source, 0.0) + to_number(lead.lead_cost)
    total_lead_costs = sum(lead_costs.values())

    paid = [e for e in entries if e.is_paid]
    wages = sum(
        to_number(e.regular_hours) * to_number(e.hourly_rate)
        + to_number(e.overtime_hours) * (to_number(e.overtime_rate) or to_number(e.hourly_rate))
        for e in paid
    )
    tips = sum(to_number(e.tip_amount) for e in paid)
    payroll = wages + tips
    total = total_lead_costs + payroll

    rows: List[List[Any]] = [
        ["EXPENSE BREAKDOWN", "", ""],
        [],
        ["LEAD COSTS BY SOURCE", "", ""],
        ["Source", "Total Cost", "Percentage"],
    ]
    for source, cost in sorted(lead_costs.items(), key=lambda item: item[1], reverse=True):
        share = cost / total_lead_costs * 100 if total_lead_costs > 0 else 0.0
        rows.append([_source_name(source), _money(cost), f"{share:.1f}%"])

    rows += [
        [],
        ["PAYROLL SUMMARY", "", ""],
        ["Total Wages", _money(wages), "Regular + Overtime"],
        ["Employee Tips", _money(tips), "Tips paid to employees"],
        ["Total Payroll Expense", _money(payroll), "Including tips"],
        [],
        ["OVERALL", "", ""],
        ["Lead Costs", _money(total_lead_costs),
         f"{total_lead_costs / total * 100:.1f}%" if total > 0 else "0.0%"],
        ["Payroll", _money(payroll), f"{payroll / total * 100:.1f}%" if total > 0 else "0.0%"],
        ["TOTAL EXPENSES", _money(total), "100%"],
    ]
    return rows


def export_financial_data_to_excel(
    jobs: Iterable[Any],
    leads: Iterable[Any],
    clients: Iterable[Any],
    time_entries: Iterable[Any],
    employees: Iterable[Any],
    date_range_label: str,
    output_dir: Optional[Path] = None,
    company_name: str = "Bantu_Movers",
    now: Optional[datetime] = None,
) -> str:
    """Write the financial workbook and return the generated filename."""
    now = now or datetime.now()
    jobs = parse_records(Job, jobs)
    leads = parse_records(Lead, leads)
    clients = parse_records(Client, clients)
    time_entries = parse_records(TimeEntry, time_entries)
    employees = parse_records(Employee, employees)

    workbook = Workbook()
    summary = workbook.active
    summary.title = SHEET_TITLES[0]
    _write_rows(
        summary,
        _summary_rows(jobs, leads, clients, time_entries, employees, date_range_label, now),
        bold_rows=(0, 4, 10, 15, 19),
    )
    _write_rows(workbook.create_sheet(SHEET_TITLES[1]), _revenue_rows(leads, jobs), bold_rows=(0, 1))
    _write_table(workbook.create_sheet(SHEET_TITLES[2]), _job_records(jobs))
    _write_table(workbook.create_sheet(SHEET_TITLES[3]), _lead_records(leads))
    _write_table(workbook.create_sheet(SHEET_TITLES[4]), _client_records(clients))
    _write_table(workbook.create_sheet(SHEET_TITLES[5]), _payroll_records(time_entries, employees))
    _write_rows(workbook.create_sheet(SHEET_TITLES[6]), _expense_rows(leads, time_entries), bold_rows=(0,))

    filename = (
        f"{_safe(company_name)}_Financial_Report_{_safe(date_range_label)}_{now:%Y-%m-%d}.xlsx"
    )
    target_dir = Path(output_dir) if output_dir else Path(".")
    target_dir.mkdir(parents=True, exist_ok=True)
    workbook.save(target_dir / filename)

    logger.info("Exported %d jobs and %d leads to %s", len(jobs), len(leads), filename)
    return filename
