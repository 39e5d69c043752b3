"""
tender-report-generator — Source package.

Modules:
    payload     — Read-only analytics payload model and JSON loader
    metrics     — Win/loss performance summary (pandas)
    narrative   — Template-based commentary and formatting helpers
    charts      — matplotlib charts rendered to in-memory PNG
    layout      — Layout cursor / pager: page breaks and running chrome
    surface     — ReportLab canvas drawing surface (top-down mm coordinates)
    pdf_builder — Section renderers and the public PDF entry points
"""
