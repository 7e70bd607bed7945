from app.models.organization import Organization, OrganizationType  # noqa: F401
from app.models.user import SurveyStatus, User, UserRole  # noqa: F401
