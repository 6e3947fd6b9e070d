"""Personal Finance Tracker package.

Record income and expenses, group them into categories and report on
them.  See ``reports.py`` for the filtering and aggregation functions,
``app.py`` for the dashboard and ``api.py`` for the HTTP service.
"""
