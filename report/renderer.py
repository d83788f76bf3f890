"""
Report renderer: turn a ReportBody into the chat message text or an export format.
Markdown and HTML go through the Jinja2 templates in report/templates.
"""

from typing import Dict, Any
import csv
import io
import json
import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from models import ReportBody

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates')

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(['html', 'xml', 'html.j2']),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=False,
)


def render_text(body: ReportBody) -> str:
    """The message body posted to chat: header, then `KEY - HH:MM` and a `* description` bullet per line."""
    parts = [body.header]
    for line in body.lines:
        parts.append(f"{line.key} - {line.duration}\n* {line.description}")
    return "\n".join(parts)


def render_markdown(body: ReportBody) -> str:
    return _env.get_template('timesheet.md.j2').render(body=body)


def render_html(body: ReportBody, generated_at: str = None) -> str:
    return _env.get_template('timesheet.html.j2').render(body=body, generated_at=generated_at)


def render_csv(body: ReportBody) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(['key', 'duration', 'description'])
    for line in body.lines:
        writer.writerow([line.key, line.duration, line.description])
    return output.getvalue()


def render_json(body: ReportBody) -> str:
    serializable: Dict[str, Any] = {'header': body.header, 'lines': [line.to_dict() for line in body.lines]}
    return json.dumps(serializable, indent=2)


def render(body: ReportBody, fmt: str = 'text', generated_at: str = None) -> str:
    """Main render function. Unknown formats fall back to the chat text."""
    fmt_l = (fmt or 'text').lower()
    if fmt_l in ('md', 'markdown'):
        return render_markdown(body)
    if fmt_l == 'csv':
        return render_csv(body)
    if fmt_l in ('html', 'htm'):
        return render_html(body, generated_at=generated_at)
    if fmt_l in ('json', 'js'):
        return render_json(body)
    return render_text(body)
