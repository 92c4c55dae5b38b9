# Models package — import all models here so Alembic can discover them.

from fundbridge.models.user import User  # noqa: F401
from fundbridge.models.business_idea import BusinessIdea  # noqa: F401
from fundbridge.models.proposal import InvestmentProposal, InvestorSnapshot  # noqa: F401
from fundbridge.models.investment import Investment  # noqa: F401
from fundbridge.models.loan_proposal import LoanProposal  # noqa: F401
from fundbridge.models.notification import Notification  # noqa: F401
from fundbridge.models.audit import AuditEvent  # noqa: F401
