"""CrediLocker package.

This package is organized by feature modules (students, field projects, CEP,
co-curricular, ...) with a thin Flask controller layer and service/repository
layers underneath.
"""
