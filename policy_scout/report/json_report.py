# policy_scout/report/json_report.py

"""
JSON report for a batch discovery run.
"""
import json
from pathlib import Path

from policy_scout.aggregator import DiscoveryReport


def render_json(report: DiscoveryReport, output_path: Path | str) -> Path:
    """
    Write *report* as JSON to *output_path*.

    :param report: aggregated batch results
    :param output_path: target JSON file; parent directories are created
    :return: Path of the written file

    Example:
    ```python
    from policy_scout.report.json_report import render_json
    report_path = render_json(report, 'reports/report.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.as_dict(), f, ensure_ascii=False, indent=2)

    return output
