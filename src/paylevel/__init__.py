"""PayLevel: shift logging, earnings projection and payslip reconciliation."""

__version__ = "2.1.0"
