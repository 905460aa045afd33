"""
Report rendering: posterior tables, figures and the HTML document.
"""

from carbonstandards.evaluation.report import generate_html_report
from carbonstandards.evaluation.tables import (
    estimates_table,
    posterior_table,
    print_group_summary,
    print_posterior_table,
    print_stage_comparison,
    save_tables,
)

__all__ = [
    "estimates_table",
    "generate_html_report",
    "posterior_table",
    "print_group_summary",
    "print_posterior_table",
    "print_stage_comparison",
    "save_tables",
]
