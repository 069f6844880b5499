"""
Portfolio module.

Entry storage, per-lot analytics, step-function price lookup and the
portfolio performance index calculator.
"""
