"""Class Attendance package.

This package is organized by feature modules (qrcodes, attendance, reports, ...)
with a thin Flask controller layer over service/repository layers.
"""
