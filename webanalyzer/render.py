"""Pure projections of a form snapshot for display.

``render`` maps a :class:`~webanalyzer.models.FormSnapshot` to a
:class:`FormView` describing which affordances are shown.  ``render_text``
and ``render_html`` turn that view into terminal lines and the single page
served by the web host.  None of these functions has side effects.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from html import escape

from webanalyzer.models import AnalysisResult, Failed, FormSnapshot, Submitting, Succeeded

PAGE_TITLE = "Webpage Analyzer"


@dataclass(frozen=True)
class FormView:
    url: str
    input_invalid: bool
    error_text: str | None
    submit_enabled: bool
    busy: bool
    result_lines: list[tuple[str, str]] = field(default_factory=list)
    failure_text: str | None = None

    @property
    def has_result(self) -> bool:
        return bool(self.result_lines)


def format_headings(headings: dict[str, int]) -> str:
    """Render the full level -> count mapping, e.g. ``{"h1": 1, "h2": 4}``."""
    return json.dumps(headings, ensure_ascii=False)


def result_lines(result: AnalysisResult) -> list[tuple[str, str]]:
    """The eight labelled result lines, in display order."""
    return [
        ("HTML Version", result.html_version),
        ("Title", result.title),
        ("Headings Count", format_headings(result.headings)),
        ("Login Form Present", "Yes" if result.has_login_form else "No"),
        ("Internal Links", str(result.internal_links)),
        ("External Links", str(result.external_links)),
        ("Accessible External Links", str(result.accessible_external_links)),
        ("Broken External Links", str(result.broken_external_links)),
    ]


def render(snapshot: FormSnapshot) -> FormView:
    state = snapshot.state
    busy = isinstance(state, Submitting)
    return FormView(
        url=snapshot.url,
        input_invalid=snapshot.validation_error is not None,
        error_text=snapshot.validation_error,
        submit_enabled=not busy,
        busy=busy,
        result_lines=result_lines(state.result) if isinstance(state, Succeeded) else [],
        failure_text=state.message if isinstance(state, Failed) else None,
    )


# ---------------------------------------------------------------------------
# Terminal
# ---------------------------------------------------------------------------

def render_text(view: FormView) -> str:
    lines: list[str] = []
    if view.error_text:
        lines.append(f"✗ {view.error_text}")
    if view.busy:
        lines.append("Analyzing …")
    if view.failure_text is not None:
        lines.append(f"Error: {view.failure_text}")
    if view.has_result:
        lines.append("Results:")
        width = max(len(label) for label, _ in view.result_lines)
        for label, value in view.result_lines:
            lines.append(f"  {label + ':':<{width + 1}} {value}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
  body {{ font-family: sans-serif; max-width: 36rem; margin: 3rem auto; text-align: center; }}
  input[type=text] {{ width: 100%; padding: .5rem; box-sizing: border-box; }}
  input.invalid {{ border: 2px solid #c62828; }}
  .helper {{ color: #c62828; font-size: .9rem; }}
  .results p {{ margin: .25rem 0; }}
</style>
</head>
<body>
<h1>{title}</h1>
<form method="get" action="/">
  <label for="url">Enter URL</label>
  <input type="text" id="url" name="url" value="{url}"{invalid}>
  {helper}
  <p><button type="submit"{disabled}>Analyze</button></p>
</form>
{busy}{body}
</body>
</html>
"""


def render_html(view: FormView) -> str:
    helper = (
        f'<p class="helper" role="alert">{escape(view.error_text)}</p>'
        if view.error_text
        else ""
    )
    if view.has_result:
        rows = "\n".join(
            f"  <p>{escape(label)}: {escape(value)}</p>" for label, value in view.result_lines
        )
        body = f'<section class="results">\n  <h2>Results:</h2>\n{rows}\n</section>'
    elif view.failure_text is not None:
        body = f'<p class="helper" role="alert">{escape(view.failure_text)}</p>'
    else:
        body = ""

    return _PAGE.format(
        title=PAGE_TITLE,
        url=escape(view.url, quote=True),
        invalid=' class="invalid" aria-invalid="true"' if view.input_invalid else "",
        helper=helper,
        disabled=" disabled" if not view.submit_enabled else "",
        busy='<p aria-busy="true">Analyzing…</p>\n' if view.busy else "",
        body=body,
    )
