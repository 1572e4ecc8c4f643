"""
SQLAlchemy ORM models package.

All models are imported here so that Base.metadata knows every table before
create_all() runs, and so other modules can import from povy_sandbox.models
directly.
"""

from povy_sandbox.models.account import Account, CardDetails, Currency  # noqa: F401
from povy_sandbox.models.transaction import (  # noqa: F401
    Transaction,
    TransactionSource,
    TransactionType,
)
