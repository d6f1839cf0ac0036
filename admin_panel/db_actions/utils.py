"""
Utility functions for db_actions package.
"""
# Standard library
import enum
from datetime import datetime

# Third-party
from sqlalchemy import and_, or_, true, DateTime, Enum

# Local modules
from .errors import EnumValueError, RequestError
from .. import vocabulary as vb
from ..model import MODELS

# Operators accepted in a per-field filter mapping, e.g. {"id": {"ne": 3}}
OPERATORS = {
    "eq": lambda column, operand: column == operand if operand is not None else column.is_(None),
    "ne": lambda column, operand: column != operand if operand is not None else column.is_not(None),
    "in": lambda column, operand: column.in_(list(operand)),
    "nin": lambda column, operand: column.not_in(list(operand)),
    "gt": lambda column, operand: column > operand,
    "gte": lambda column, operand: column >= operand,
    "lt": lambda column, operand: column < operand,
    "lte": lambda column, operand: column <= operand,
    "like": lambda column, operand: column.like(operand),
}


def model_for(kind):
    """
    Returns the mapped class for an entity kind (its table name).
    """
    try:
        return MODELS[kind]
    except KeyError as error:
        raise RequestError(f"Unknown entity '{kind}'. Valid entities are: {', '.join(MODELS)}") from error


def column_for(model_class, field):
    """
    Returns the column named field of model_class.
    """
    column = model_class.__table__.columns.get(field)
    if column is None:
        raise RequestError(f"'{field}' is not a column of '{model_class.__tablename__}'")
    return getattr(model_class, column.key)


def build_conditions(model_class, record_filter):
    """
    Translates a filter mapping into a list of SQLAlchemy conditions to be ANDed.

    - scalar value: equality (None gives IS NULL)
    - list, tuple or set: IN
    - mapping: operators from OPERATORS, ANDed together
    - "and" / "or": list of sub-filters combined accordingly
    """
    if record_filter is not None and not isinstance(record_filter, dict):
        raise RequestError(f"A filter has to be a JSON object, got '{record_filter}'")
    conditions = []
    for field, value in (record_filter or {}).items():
        if field in (vb.AND, vb.OR):
            if not isinstance(value, (list, tuple)):
                raise RequestError(f"'{field}' expects a list of filters")
            combine = and_ if field == vb.AND else or_
            conditions.append(combine(*[_all_of(model_class, sub) for sub in value]))
            continue

        column = column_for(model_class, field)
        if isinstance(value, dict):
            for operator, operand in value.items():
                if operator not in OPERATORS:
                    raise RequestError(f"Unknown operator '{operator}' on '{field}'")
                if operator in ("in", "nin") and not isinstance(operand, (list, tuple)):
                    raise RequestError(f"'{operator}' on '{field}' expects a list, got '{operand}'")
                conditions.append(OPERATORS[operator](column, operand))
        elif isinstance(value, (list, tuple, set)):
            conditions.append(column.in_(list(value)))
        elif value is None:
            conditions.append(column.is_(None))
        else:
            conditions.append(column == value)
    return conditions


def _all_of(model_class, record_filter):
    conditions = build_conditions(model_class, record_filter)
    if not conditions:
        return true()
    return and_(*conditions)


def coerce_values(model_class, data):
    """
    Converts JSON values of data to what the columns of model_class expect:
    enum columns accept the enum value or name, datetime columns accept ISO strings.
    Unknown columns raise a RequestError.
    """
    coerced = {}
    for field, value in data.items():
        column = model_class.__table__.columns.get(field)
        if column is None:
            raise RequestError(f"'{field}' is not a column of '{model_class.__tablename__}'")
        if value is not None and isinstance(column.type, Enum) and column.type.enum_class is not None:
            value = to_enum(column.type.enum_class, value)
        elif isinstance(value, str) and isinstance(column.type, DateTime):
            try:
                value = datetime.fromisoformat(value)
            except ValueError as error:
                raise RequestError(f"'{value}' is not an ISO date for '{field}'") from error
        coerced[column.key] = value
    return coerced


def to_enum(enum_class, value):
    """
    Returns the member of enum_class matching value, by value first then by name.
    """
    if isinstance(value, enum.Enum):
        return value
    try:
        return enum_class(value)
    except ValueError:
        pass
    if isinstance(value, str) and value.upper() in enum_class.__members__:
        return enum_class[value.upper()]
    raise EnumValueError(enum=enum_class, value=value)
