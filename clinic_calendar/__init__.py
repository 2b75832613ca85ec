"""
Clinic Calendar.

Appointment scheduling backend with recurring series support.
"""

__version__ = "0.1.0"
