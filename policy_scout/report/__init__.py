# File: policy_scout/report/__init__.py
"""policy_scout.report: JSON and HTML reports for batch discovery runs."""

from __future__ import annotations

from policy_scout.report.html_report import DEFAULT_TEMPLATE_DIR, render_html
from policy_scout.report.json_report import render_json

__all__ = ["DEFAULT_TEMPLATE_DIR", "render_json", "render_html"]
