"""
django-packflow: Product pack workflow engine.

Provides:
- Department topology: canonical roles, alias resolution, terminal role
- Quantity reconciliation: pure accept/send arithmetic
- Transition services: intake, send and accept as atomic operations
- Selectors for pending, accepted and lineage views
"""

__version__ = "0.1.0"

default_app_config = "django_packflow.apps.DjangoPackflowConfig"
