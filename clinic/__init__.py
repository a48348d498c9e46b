"""
Clinic backend

FastAPI service for a medical clinic: appointments, patient profiles, the
doctor directory and lab records, behind bearer-token authentication and a
role-based access policy.
"""

__version__ = "1.0.0"
