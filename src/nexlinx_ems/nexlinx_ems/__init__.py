"""Nexlinx Smart EMS package.

Feature modules (biotime, staging, attendance, timing, overbilling, ...)
sit behind a thin Flask controller layer; each feature keeps its own
model/repository/service split so the reconciliation pipeline can be
driven from HTTP, the scheduler, or a script.
"""
