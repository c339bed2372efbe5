from agency_crm.models.agency import Agency
from agency_crm.models.user import User, UserRole
from agency_crm.models.client import Client
from agency_crm.models.policy import Policy, PolicyType, PolicyStatus
from agency_crm.models.activity import Activity, ActivityType
from agency_crm.models.document import Document
from agency_crm.models.note import ClientNote

__all__ = [
    "Agency",
    "User",
    "UserRole",
    "Client",
    "Policy",
    "PolicyType",
    "PolicyStatus",
    "Activity",
    "ActivityType",
    "Document",
    "ClientNote",
]
