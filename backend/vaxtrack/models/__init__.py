from vaxtrack.models.audit_log import AuditLogEntry
from vaxtrack.models.child import Child
from vaxtrack.models.drive import VaccineDrive
from vaxtrack.models.profile import Profile
from vaxtrack.models.refresh_session import RefreshSession
from vaxtrack.models.user import Role, User
from vaxtrack.models.vaccine import Vaccine, VaccineRecord

__all__ = [
    "AuditLogEntry",
    "Child",
    "Profile",
    "RefreshSession",
    "Role",
    "User",
    "Vaccine",
    "VaccineDrive",
    "VaccineRecord",
]
