"""KPI tracker: reporting periods, status derivation and reminder escalation."""

__version__ = "0.1.0"
