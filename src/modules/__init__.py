"""
EDAŞ Back-office Modules

- auth: Authentication, users, roles
- edas: AYEDAŞ / BEDAŞ notifications, approval steps, step documents
- voltage_drop: Low-voltage line voltage-drop calculator
- integrations: HTTP client for the back-office API
"""
