"""Shiftwise package.

Shift cost, break and clock-in engine for multi-location workforce scheduling.
Organized by feature modules (breaks, timeclock, payroll, ...) with thin Flask
controllers over service/repository layers.
"""
