import csv
from decimal import Decimal, InvalidOperation
from io import BytesIO, StringIO

from flask import render_template_string
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.errors import ValidationError
from app.services.parsing import money

RECORD_EXPORT_EXCLUDE = ("id", "property_id", "owner_id", "guest_id", "attachment_url")

BOOKING_HEADER = ["Reservation ID", "Guest Name", "Stay Dates", "Revenue", "Taxes", "Fees", "Net Revenue"]
EXPENSE_HEADER = ["Expense Type", "Date", "Amount", "Notes"]

_SUMMARY_TOTALS = {
    "Total Revenue": "total_revenue",
    "Total Expenses": "total_expenses",
    "Management Fee": "management_fee",
    "Net Payout": "net_payout",
}

STATEMENT_HTML = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>Owner Statement #{{ s.id }}</title>
</head>
<body style="font-family: Helvetica, Arial, sans-serif; color: #222; margin: 32px;">
  <h1 style="margin-bottom: 4px;">Owner Statement</h1>
  <p style="margin-top: 0; color: #666;">{{ property_name }} &middot; {{ s.period_start.isoformat() }} to {{ s.period_end.isoformat() }}</p>

  <table style="border-collapse: collapse; margin: 16px 0;">
    {% for label, value in summary %}
    <tr>
      <td style="padding: 4px 16px 4px 0; font-weight: bold;">{{ label }}</td>
      <td style="padding: 4px 0;">{{ value }}</td>
    </tr>
    {% endfor %}
  </table>

  <h2>Detailed Booking Lines</h2>
  <table style="border-collapse: collapse; width: 100%;">
    <tr>{% for h in booking_header %}<th style="border-bottom: 1px solid #999; text-align: left; padding: 4px;">{{ h }}</th>{% endfor %}</tr>
    {% for row in booking_rows %}
    <tr>{% for cell in row %}<td style="border-bottom: 1px solid #eee; padding: 4px;">{{ cell }}</td>{% endfor %}</tr>
    {% else %}
    <tr><td colspan="{{ booking_header|length }}" style="padding: 4px; color: #666;">No bookings in this period.</td></tr>
    {% endfor %}
  </table>

  <h2>Expense Lines</h2>
  <table style="border-collapse: collapse; width: 100%;">
    <tr>{% for h in expense_header %}<th style="border-bottom: 1px solid #999; text-align: left; padding: 4px;">{{ h }}</th>{% endfor %}</tr>
    {% for row in expense_rows %}
    <tr>{% for cell in row %}<td style="border-bottom: 1px solid #eee; padding: 4px;">{{ cell }}</td>{% endfor %}</tr>
    {% else %}
    <tr><td colspan="{{ expense_header|length }}" style="padding: 4px; color: #666;">No expenses in this period.</td></tr>
    {% endfor %}
  </table>

  <p style="margin-top: 32px; font-size: 12px; color: #888;">Generated {{ generated_on }}</p>
</body>
</html>
"""

RECORDS_HTML = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
</head>
<body style="font-family: Helvetica, Arial, sans-serif; color: #222; margin: 32px;">
  <h1>{{ title }}</h1>
  <table style="border-collapse: collapse; width: 100%;">
    <tr>{% for h in header %}<th style="border-bottom: 1px solid #999; text-align: left; padding: 4px;">{{ h }}</th>{% endfor %}</tr>
    {% for row in rows %}
    <tr>{% for cell in row %}<td style="border-bottom: 1px solid #eee; padding: 4px;">{{ cell }}</td>{% endfor %}</tr>
    {% else %}
    <tr><td style="padding: 4px; color: #666;">Nothing to report.</td></tr>
    {% endfor %}
  </table>
</body>
</html>
"""


def _amount(value):
    return f"{money(value):.2f}"


def _summary_rows(statement):
    return [
        ("Statement ID", str(statement.id)),
        ("Property", statement.property.name if statement.property else ""),
        ("Period", f"{statement.period_start.isoformat()} to {statement.period_end.isoformat()}"),
        ("Total Revenue", _amount(statement.total_revenue)),
        ("Total Expenses", _amount(statement.total_expenses)),
        ("Management Fee", _amount(statement.management_fee)),
        ("Net Payout", _amount(statement.net_payout)),
        ("Payout Status", statement.payout_status),
    ]


def _booking_rows(statement):
    return [
        [
            str(line.reservation_id or ""),
            line.guest_name or "",
            line.stay_dates or "",
            _amount(line.revenue),
            _amount(line.taxes),
            _amount(line.fees),
            _amount(line.net_revenue),
        ]
        for line in statement.booking_lines
    ]


def _expense_rows(statement):
    return [
        [line.expense_type, line.date.isoformat(), _amount(line.amount), line.notes or ""]
        for line in statement.expense_lines
    ]


class ExportService:
    @staticmethod
    def statement_filename(statement, extension):
        return f"statement-{statement.id}-{statement.period_start.isoformat()}.{extension}"

    @staticmethod
    def statement_csv(statement):
        buffer = StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["Owner Statement"])
        writer.writerow([])
        for label, value in _summary_rows(statement):
            writer.writerow([label, value])
        writer.writerow([])
        writer.writerow(["Detailed Booking Lines"])
        writer.writerow(BOOKING_HEADER)
        writer.writerows(_booking_rows(statement))
        writer.writerow([])
        writer.writerow(["Expense Lines"])
        writer.writerow(EXPENSE_HEADER)
        writer.writerows(_expense_rows(statement))
        return buffer.getvalue()

    @staticmethod
    def parse_statement_csv(text):
        """Read the summary totals back out of a statement CSV export."""
        totals = {}
        for row in csv.reader(StringIO(text)):
            if len(row) == 2 and row[0] in _SUMMARY_TOTALS:
                try:
                    totals[_SUMMARY_TOTALS[row[0]]] = Decimal(row[1])
                except InvalidOperation as exc:
                    raise ValidationError(f"Malformed amount for {row[0]}.") from exc
            if row == ["Detailed Booking Lines"]:
                break
        missing = [key for key in _SUMMARY_TOTALS.values() if key not in totals]
        if missing:
            raise ValidationError("Statement CSV is missing summary totals.", fields=missing)
        return totals

    @staticmethod
    def statement_html(statement):
        created = statement.created_at
        return render_template_string(
            STATEMENT_HTML,
            s=statement,
            property_name=statement.property.name if statement.property else "",
            summary=_summary_rows(statement),
            booking_header=BOOKING_HEADER,
            booking_rows=_booking_rows(statement),
            expense_header=EXPENSE_HEADER,
            expense_rows=_expense_rows(statement),
            generated_on=created.strftime("%Y-%m-%d") if created else statement.period_end.isoformat(),
        )

    @staticmethod
    def statement_pdf(statement):
        buffer = BytesIO()
        p = canvas.Canvas(buffer, pagesize=A4, invariant=1)
        p.setTitle(f"Owner Statement #{statement.id}")
        width, height = A4
        bottom = 60

        y = height - 60
        p.setFont("Helvetica-Bold", 20)
        p.drawString(50, y, "Owner Statement")

        y -= 32
        p.setFont("Helvetica", 11)
        for label, value in _summary_rows(statement):
            p.drawString(50, y, f"{label}: {value}")
            y -= 18

        def section(title, header, rows, columns):
            nonlocal y
            if y < bottom + 60:
                p.showPage()
                y = height - 60
            y -= 14
            p.setFont("Helvetica-Bold", 13)
            p.drawString(50, y, title)
            y -= 20
            p.setFont("Helvetica-Bold", 9)
            for x, cell in zip(columns, header):
                p.drawString(x, y, cell)
            y -= 14
            p.setFont("Helvetica", 9)
            for row in rows:
                if y < bottom:
                    p.showPage()
                    y = height - 60
                    p.setFont("Helvetica", 9)
                for x, cell in zip(columns, row):
                    p.drawString(x, y, str(cell)[:40])
                y -= 14

        section("Detailed Booking Lines", BOOKING_HEADER, _booking_rows(statement), [50, 120, 220, 340, 400, 450, 500])
        section("Expense Lines", EXPENSE_HEADER, _expense_rows(statement), [50, 170, 260, 340])

        p.showPage()
        p.save()
        return buffer.getvalue()

    @staticmethod
    def records_csv(rows, exclude=RECORD_EXPORT_EXCLUDE):
        buffer = StringIO()
        if not rows:
            return ""
        header = [key for key in rows[0].keys() if key not in exclude]
        writer = csv.DictWriter(
            buffer,
            fieldnames=header,
            extrasaction="ignore",
            quoting=csv.QUOTE_MINIMAL,
            lineterminator="\n",
        )
        writer.writeheader()
        for row in rows:
            writer.writerow({key: "" if row.get(key) is None else row.get(key) for key in header})
        return buffer.getvalue()

    @staticmethod
    def records_html(title, rows, exclude=RECORD_EXPORT_EXCLUDE):
        header = [key for key in rows[0].keys() if key not in exclude] if rows else []
        return render_template_string(
            RECORDS_HTML,
            title=title,
            header=[key.replace("_", " ").title() for key in header],
            rows=[["" if row.get(key) is None else row.get(key) for key in header] for row in rows],
        )
