"""schema.py: Marshmallow schemas for serializing SQLAlchemy models."""

import enum

from marshmallow import post_dump
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema
from sqlalchemy.orm.exc import DetachedInstanceError

from .model import (
    User,
    UserAuthSettings,
    UserToken,
    Role,
    ProjectRoute,
    RouteRole,
    UserRole,
    Blog
    )

class EnumResolvingMixin:
    """
    Mixin to resolve enum attributes to their values during serialization.
    """
    @post_dump(pass_original=True)
    def resolve_enums(self, data, original, **kwargs):
        """
        Convert enum attributes to their values in the serialized output.
        """
        for attr in data:
            try:
                value = getattr(original, attr)
            except (AttributeError, DetachedInstanceError):
                continue
            if isinstance(value, enum.Enum):
                data[attr] = value.value
        return data

class BaseSchema(EnumResolvingMixin, SQLAlchemyAutoSchema):
    """
    Base schema adding the table name to the output.
    """
    @post_dump(pass_original=True)
    def add_tablename(self, data, original, **kwargs):
        """
        Add __tablename__ to the serialized output.
        """
        if hasattr(original, '__tablename__'):
            data['tablename'] = original.__tablename__
        return data

class UserSchema(BaseSchema):
    """
    UserSchema, the password never leaves the database
    """
    class Meta:
        model = User
        include_fk = True
        exclude = ("password",)

class UserAuthSettingsSchema(BaseSchema):
    """
    UserAuthSettingsSchema, codes and OTPs are not dumped
    """
    class Meta:
        model = UserAuthSettings
        include_fk = True
        exclude = ("login_otp", "reset_password_code")

class UserTokenSchema(BaseSchema):
    class Meta:
        model = UserToken
        include_fk = True

class RoleSchema(BaseSchema):
    class Meta:
        model = Role
        include_fk = True

class ProjectRouteSchema(BaseSchema):
    class Meta:
        model = ProjectRoute
        include_fk = True

class RouteRoleSchema(BaseSchema):
    class Meta:
        model = RouteRole
        include_fk = True

class UserRoleSchema(BaseSchema):
    class Meta:
        model = UserRole
        include_fk = True

class BlogSchema(BaseSchema):
    class Meta:
        model = Blog
        include_fk = True

SCHEMAS = {
    User: UserSchema,
    UserAuthSettings: UserAuthSettingsSchema,
    UserToken: UserTokenSchema,
    Role: RoleSchema,
    ProjectRoute: ProjectRouteSchema,
    RouteRole: RouteRoleSchema,
    UserRole: UserRoleSchema,
    Blog: BlogSchema
}

def serialize(obj):
    """
    Serialize a SQLAlchemy model instance or list of instances using the appropriate Marshmallow schema.

    Args:
        obj: A SQLAlchemy model instance or a list of instances.

    Returns:
        dict or list of dicts: Serialized representation.
    """
    if isinstance(obj, list):
        if not obj:
            return []
        return [serialize(item) for item in obj]
    model_cls = type(obj)
    schema_class = SCHEMAS.get(model_cls)
    if not schema_class:
        raise ValueError(f"No schema found for type {model_cls}")
    return schema_class().dump(obj)
