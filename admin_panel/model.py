"""Models for the database using SQLAlchemy ORM."""
from __future__ import annotations

import enum
import logging
from datetime import datetime

from sqlalchemy import (
    ForeignKey,
    Index,
    Enum,
    DateTime,
    )

from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column
    )

from sqlalchemy.sql import func

logger = logging.getLogger(__name__)


class UserTypeEnum(enum.Enum):
    """
    user_type enum
    """
    USER = 1
    ADMIN = 2

    def to_json(self):
        """Serialize the enum to json"""
        return self.value


class Base(DeclarativeBase):
    """
    Base declarative table
    """
    # this is needed for the enum to work properly right now
    # see https://github.com/sqlalchemy/sqlalchemy/discussions/8856
    type_annotation_map = {
        UserTypeEnum: Enum(UserTypeEnum),
    }


class BaseTable(Base):
    """
    Define fields common of all tables in database
    BaseTable:
        id integer [PK]
        is_active boolean
        is_deleted boolean
        added_by integer (user.id, audit only)
        updated_by integer (user.id, audit only)
        created_at timestamp
        updated_at timestamp
    """
    __abstract__ = True

    id: Mapped[int] = mapped_column(primary_key=True)
    is_active: Mapped[bool] = mapped_column(default=True)
    is_deleted: Mapped[bool] = mapped_column(default=False)
    # Audit columns reference user.id but carry no database constraint:
    # only the cascade graph knows about them.
    added_by: Mapped[int] = mapped_column(default=None, nullable=True, index=True)
    updated_by: Mapped[int] = mapped_column(default=None, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    def __repr__(self):
        """
        returns:
         {tablename: {mapped_columns}} only and not the relationships Attributes
        """
        dico = {}
        dico[self.__tablename__] = {c.key: getattr(self, c.key) for c in self.__table__.columns}
        return dico.__repr__()


class User(BaseTable):
    """
    User:
        id integer [PK]
        username text
        email text (unique)
        password text
        name text
        user_type enum
        mobile_no text
    """
    __tablename__ = "user"
    __table_args__ = (
        Index("ix_user_email", "email"),
    )

    username: Mapped[str] = mapped_column(default=None, nullable=True)
    email: Mapped[str] = mapped_column(default=None, nullable=False, unique=True)
    password: Mapped[str] = mapped_column(default=None, nullable=True)
    name: Mapped[str] = mapped_column(default=None, nullable=True)
    user_type: Mapped[UserTypeEnum] = mapped_column(default=UserTypeEnum.USER)
    mobile_no: Mapped[str] = mapped_column(default=None, nullable=True)


class UserAuthSettings(BaseTable):
    """
    UserAuthSettings:
        id integer [PK]
        user_id integer [ref: > user.id]
        login_otp text
        expired_time_of_login_otp timestamp
        reset_password_code text
        expired_time_of_reset_password_code timestamp
        login_retry_limit integer
        login_reactive_time timestamp
    """
    __tablename__ = "user_auth_settings"
    __table_args__ = (
        Index("ix_user_auth_settings_user_id", "user_id"),
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), default=None, nullable=True)
    login_otp: Mapped[str] = mapped_column(default=None, nullable=True)
    expired_time_of_login_otp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=None, nullable=True)
    reset_password_code: Mapped[str] = mapped_column(default=None, nullable=True)
    expired_time_of_reset_password_code: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=None, nullable=True)
    login_retry_limit: Mapped[int] = mapped_column(default=0)
    login_reactive_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=None, nullable=True)


class UserToken(BaseTable):
    """
    UserToken:
        id integer [PK]
        user_id integer [ref: > user.id]
        token text
        token_expired_time timestamp
        is_token_expired boolean
    """
    __tablename__ = "user_token"
    __table_args__ = (
        Index("ix_user_token_user_id", "user_id"),
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), default=None, nullable=True)
    token: Mapped[str] = mapped_column(default=None, nullable=True)
    token_expired_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=None, nullable=True)
    is_token_expired: Mapped[bool] = mapped_column(default=False)


class Role(BaseTable):
    """
    Role:
        id integer [PK]
        name text
        code text
        weight integer
    """
    __tablename__ = "role"

    name: Mapped[str] = mapped_column(default=None, nullable=False)
    code: Mapped[str] = mapped_column(default=None, nullable=True)
    weight: Mapped[int] = mapped_column(default=None, nullable=True)


class ProjectRoute(BaseTable):
    """
    ProjectRoute:
        id integer [PK]
        route_name text
        method text
        uri text
    """
    __tablename__ = "project_route"

    route_name: Mapped[str] = mapped_column(default=None, nullable=False)
    method: Mapped[str] = mapped_column(default=None, nullable=False)
    uri: Mapped[str] = mapped_column(default=None, nullable=False)


class RouteRole(BaseTable):
    """
    RouteRole:
        id integer [PK]
        route_id integer [ref: > project_route.id]
        role_id integer [ref: > role.id]
    """
    __tablename__ = "route_role"
    __table_args__ = (
        Index("ix_route_role_route_id", "route_id"),
        Index("ix_route_role_role_id", "role_id"),
    )

    route_id: Mapped[int] = mapped_column(ForeignKey("project_route.id"), default=None, nullable=True)
    role_id: Mapped[int] = mapped_column(ForeignKey("role.id"), default=None, nullable=True)


class UserRole(BaseTable):
    """
    UserRole:
        id integer [PK]
        user_id integer [ref: > user.id]
        role_id integer [ref: > role.id]
    """
    __tablename__ = "user_role"
    __table_args__ = (
        Index("ix_user_role_user_id", "user_id"),
        Index("ix_user_role_role_id", "role_id"),
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), default=None, nullable=True)
    role_id: Mapped[int] = mapped_column(ForeignKey("role.id"), default=None, nullable=True)


class Blog(BaseTable):
    """
    Blog:
        id integer [PK]
        title text
        alternative_headline text
        image text
        publish_date timestamp
        author text
        content text
    """
    __tablename__ = "blog"

    title: Mapped[str] = mapped_column(default=None, nullable=True)
    alternative_headline: Mapped[str] = mapped_column(default=None, nullable=True)
    image: Mapped[str] = mapped_column(default=None, nullable=True)
    publish_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=None, nullable=True)
    author: Mapped[str] = mapped_column(default=None, nullable=True)
    content: Mapped[str] = mapped_column(default=None, nullable=True)


# Entity kind (table name) to mapped class
MODELS = {
    cls.__tablename__: cls
    for cls in (User, UserAuthSettings, UserToken, Role, ProjectRoute, RouteRole, UserRole, Blog)
}
