"""Academy Attendance package.

Attendance and kiosk check-in for a martial-arts academy, organized by
feature modules (students, classes, attendance, checkin, stats, kiosk) with a
thin Flask controller layer over service/repository layers.
"""
