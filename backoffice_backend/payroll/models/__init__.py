# payroll/models/__init__.py

from .payroll_run import PayrollItem, PayrollRun

__all__ = [
    "PayrollRun",
    "PayrollItem",
]
