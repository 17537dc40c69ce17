"""Shift scheduling and time clock package.

Organized by feature modules (shifts, timeclock, coverage, ...) with a thin Flask
controller layer over service and repository layers. Workers and locations are read
from external directories; shifts and clock entries are owned here.
"""
