"""Text reporting for the simulator."""
from .reporting import ReportGenerator

__all__ = ['ReportGenerator']
