"""
Campaign Budget & Profitability Model.

Editable cost ledgers (salaries, hourly labor, housing and travel, recruiting,
misc) roll up into overhead and are compared against the revenue model to
produce profit, margin, break-even price, and implied staffing. Edits flow
through `BudgetWorkspace.dispatch`, which also governs version locking.
"""
