"""Convenience exports for application schemas."""

from __future__ import annotations

from .audit import AuditEntrySchema, AuditFilterSchema
from .auth import (
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from .catalog import DriveCreateSchema, DriveFilterSchema, DriveSchema, VaccineSchema
from .child import ChildCreateSchema, ChildSchema, ChildUpdateSchema
from .common import MetaSchema, PaginationQuerySchema, build_meta
from .profile import ProfileSchema, ProfileUpdateSchema
from .record import VaccineRecordCreateSchema, VaccineRecordSchema, VaccineRecordUpdateSchema

__all__ = [
    "AuditEntrySchema",
    "AuditFilterSchema",
    "ChildCreateSchema",
    "ChildSchema",
    "ChildUpdateSchema",
    "DriveCreateSchema",
    "DriveFilterSchema",
    "DriveSchema",
    "LoginSchema",
    "LogoutSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "ProfileSchema",
    "ProfileUpdateSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UserSchema",
    "VaccineRecordCreateSchema",
    "VaccineRecordSchema",
    "VaccineRecordUpdateSchema",
    "VaccineSchema",
    "build_meta",
]
