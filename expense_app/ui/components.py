"""
Reusable HTML components for the expense claims UI.

Rendering functions for status badges, the history table, the detail
modal and inline messages. All components use the ``ex-`` classes of the
app stylesheet; every value coming from the backend is HTML-escaped.
"""
from html import escape

from expense_core.models import ApplicationDetails, HistoryEntry
from expense_core.status import status_label, status_style


def yen(amount) -> str:
    return f"{int(amount or 0):,} 円"


def status_badge_html(status_id, label: str = "") -> str:
    """Pill badge for an application status; unknown ids get the neutral style."""
    style = status_style(status_id)
    return f'<span class="ex-badge ex-badge-{style}">{escape(status_label(status_id, label))}</span>'


def message_html(text: str, is_error: bool = True) -> str:
    kind = "error" if is_error else "success"
    body = "<br>".join(escape(line) for line in text.split("\n"))
    return f'<div class="ex-alert ex-alert-{kind}">{body}</div>'


def _placeholder_row(text: str, colspan: int, kind: str = "muted") -> str:
    return f'<tr><td class="ex-td ex-td-{kind}" colspan="{colspan}">{escape(text)}</td></tr>'


def _table(headers: list[tuple[str, str]], body: str) -> str:
    head = "".join(f'<th class="ex-th {cls}">{escape(h)}</th>' for h, cls in headers)
    return f'<table class="ex-table"><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>'


HISTORY_HEADERS = [("申請ID", ""), ("申請日", ""), ("合計金額", "ex-right"), ("ステータス", "")]


def history_placeholder_html(text: str, is_error: bool = False) -> str:
    return _table(HISTORY_HEADERS, _placeholder_row(text, len(HISTORY_HEADERS), "error" if is_error else "muted"))


def history_table_html(entries: list[HistoryEntry]) -> str:
    """Render the submission history. An empty list is a normal, non-error result."""
    if not entries:
        return history_placeholder_html("申請履歴はありません。")

    rows = []
    for item in entries:
        rows.append(f'''
        <tr>
          <td class="ex-td ex-mono" title="{escape(str(item.id))}">{escape(str(item.id))}</td>
          <td class="ex-td">{escape(item.date)}</td>
          <td class="ex-td ex-right ex-strong">{yen(item.total)}</td>
          <td class="ex-td">{status_badge_html(item.status_id, item.status_label)}</td>
        </tr>''')
    return _table(HISTORY_HEADERS, "".join(rows))


DETAIL_HEADERS = [
    ("日付", ""), ("業務・訪問先", ""), ("利用路線", ""), ("出発", ""), ("到着", ""),
    ("単価", "ex-right"), ("往復", "ex-center"), ("金額", "ex-right"),
]


def details_header_html(details: ApplicationDetails) -> str:
    fields = [
        ("申請ID", escape(str(details.application_id or ""))),
        ("氏名", escape(details.employee_name)),
        ("部署", escape(details.department_name)),
        ("申請日", escape(details.application_date)),
        ("ステータス", status_badge_html(details.status_id, details.status_label)),
    ]
    items = "".join(f'<div class="ex-field"><dt>{k}</dt><dd>{v}</dd></div>' for k, v in fields)
    return f'<dl class="ex-fields">{items}</dl>'


def details_lines_html(details: ApplicationDetails) -> str:
    """Every detail line, no paging."""
    if not details.lines:
        return _table(DETAIL_HEADERS, _placeholder_row("明細はありません。", len(DETAIL_HEADERS)))

    rows = []
    for line in details.lines:
        rows.append(f'''
        <tr>
          <td class="ex-td">{escape(line.use_date)}</td>
          <td class="ex-td">{escape(line.purpose)}</td>
          <td class="ex-td">{escape(line.line_name)}</td>
          <td class="ex-td">{escape(line.departure_station)}</td>
          <td class="ex-td">{escape(line.arrival_station)}</td>
          <td class="ex-td ex-right">{line.unit_price:,}</td>
          <td class="ex-td ex-center ex-check">{"✓" if line.is_round_trip else ""}</td>
          <td class="ex-td ex-right ex-strong">{yen(line.line_total)}</td>
        </tr>''')
    return _table(DETAIL_HEADERS, "".join(rows))


def details_total_html(details: ApplicationDetails) -> str:
    return f'<div class="ex-total">合計金額 <strong>{yen(details.total_amount)}</strong></div>'
