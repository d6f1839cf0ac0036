"""
Record actions behind the entity API: create, read, update and the cascading
deletes. Every function returns the action envelope
{"DB_ACTION_OUTPUT": ..., "DB_ACTION_WARNING": [...]} used by the API.
"""
# Standard library
import logging
from contextlib import contextmanager

# Third-party
from sqlalchemy.exc import IntegrityError

# Local modules
from .cascade import CascadeExecutor, NoRecordsFound
from .errors import DidNotFindError, RequestError, UniqueConstraintError
from .store import RecordStore
from .utils import model_for
from .. import vocabulary as vb

logger = logging.getLogger(__name__)

# Columns a client never sets directly
PROTECTED_COLUMNS = (vb.ID, vb.ADDED_BY, vb.UPDATED_BY)


def _envelope():
    return {
        vb.DB_ACTION_WARNING: [],
        vb.DB_ACTION_OUTPUT: []
    }


def _finish(ret):
    # If no warning
    if not ret[vb.DB_ACTION_WARNING]:
        ret.pop(vb.DB_ACTION_WARNING)
    return ret


def _clean(data):
    if not isinstance(data, dict):
        raise RequestError("Record data has to be a JSON object")
    return {key: value for key, value in data.items() if key not in PROTECTED_COLUMNS}


@contextmanager
def _integrity_guard(session, kind):
    """
    Flushes the changes made in the block, turning integrity errors into
    db_actions errors.
    """
    try:
        yield
        session.flush()
    except IntegrityError as error:
        session.rollback()
        logger.warning("Integrity error on '%s': %s", kind, error.orig)
        if "unique" in str(error.orig).lower():
            raise UniqueConstraintError(message=f"'{kind}' violates a unique constraint: {error.orig}") from error
        raise RequestError(f"'{kind}' violates a database constraint: {error.orig}") from error


def add(kind, data, actor_id, session):
    """Create one record of kind, stamped as added by actor_id."""
    ret = _envelope()
    store = RecordStore(session)
    with _integrity_guard(session, kind):
        record = store.create(kind, {**_clean(data), vb.ADDED_BY: actor_id})
    ret[vb.DB_ACTION_OUTPUT].append(record)
    return _finish(ret)


def add_bulk(kind, data_list, actor_id, session):
    """Create many records of kind, stamped as added by actor_id."""
    if not isinstance(data_list, list) or not data_list:
        raise RequestError(argument=vb.DATA)
    ret = _envelope()
    store = RecordStore(session)
    with _integrity_guard(session, kind):
        records = store.create_many(kind, [{**_clean(data), vb.ADDED_BY: actor_id} for data in data_list])
    ret[vb.DB_ACTION_OUTPUT].extend(records)
    return _finish(ret)


def find_all(kind, record_filter, session, count_only=False):
    """
    Records of kind matching record_filter, or their number when count_only.
    """
    ret = _envelope()
    store = RecordStore(session)
    if count_only:
        total = store.count(kind, record_filter)
        if not total:
            ret[vb.DB_ACTION_WARNING].append(f"No {kind} found with the following criteria: {record_filter}")
        ret[vb.DB_ACTION_OUTPUT] = {vb.TOTAL_RECORDS: total}
        return _finish(ret)

    records = store.find_all(kind, record_filter)
    if not records:
        ret[vb.DB_ACTION_WARNING].append(f"No {kind} found with the following criteria: {record_filter}")
    ret[vb.DB_ACTION_OUTPUT].extend(records)
    return _finish(ret)


def count(kind, record_filter, session):
    """Number of records of kind matching record_filter."""
    return find_all(kind, record_filter, session, count_only=True)


def get(kind, record_id, session):
    """One record of kind by id."""
    ret = _envelope()
    record = RecordStore(session).get(kind, record_id)
    if record is None:
        raise DidNotFindError(table=kind, attribute=vb.ID, query=record_id)
    ret[vb.DB_ACTION_OUTPUT].append(record)
    return _finish(ret)


def find_one(kind, record_filter, session):
    """First record of kind matching record_filter, DidNotFindError if there is none."""
    ret = _envelope()
    records = RecordStore(session).find_all(kind, record_filter)
    if not records:
        raise DidNotFindError(message=f"No {kind} found with the following criteria: {record_filter}")
    ret[vb.DB_ACTION_OUTPUT].append(records[0])
    return _finish(ret)


def update(kind, record_id, data, actor_id, session, partial=False):
    """
    Update one record of kind by id, stamped as updated by actor_id.
    A full update needs every required column, a partial one does not.
    """
    ret = _envelope()
    store = RecordStore(session)
    data = _clean(data)
    if not partial:
        missing = [
            column.key for column in model_for(kind).__table__.columns
            if not column.nullable and column.default is None and column.server_default is None
            and not column.primary_key and column.key not in data
        ]
        if missing:
            raise RequestError(f"Full update of '{kind}' requires: {', '.join(missing)}")
    if store.get(kind, record_id) is None:
        raise DidNotFindError(table=kind, attribute=vb.ID, query=record_id)

    with _integrity_guard(session, kind):
        store.update(kind, {vb.ID: record_id}, {**data, vb.UPDATED_BY: actor_id})
    session.expire_all()
    ret[vb.DB_ACTION_OUTPUT].append(store.get(kind, record_id))
    return _finish(ret)


def update_bulk(kind, record_filter, data, actor_id, session):
    """Update every record of kind matching record_filter."""
    if not isinstance(data, dict) or not data:
        raise RequestError(argument=vb.DATA)
    ret = _envelope()
    store = RecordStore(session)
    with _integrity_guard(session, kind):
        affected = store.update(kind, record_filter, {**_clean(data), vb.UPDATED_BY: actor_id})
    if not affected:
        ret[vb.DB_ACTION_WARNING].append(f"No {kind} found with the following criteria: {record_filter}")
    ret[vb.DB_ACTION_OUTPUT] = affected
    return _finish(ret)


def _cascade_result(ret, result):
    if isinstance(result, NoRecordsFound):
        ret[vb.DB_ACTION_WARNING].append(result.message)
        ret[vb.DB_ACTION_OUTPUT] = None
    else:
        ret[vb.DB_ACTION_OUTPUT] = result
    return _finish(ret)


def soft_delete(kind, record_filter, actor_id, session, dry_run=False, max_depth=None):
    """
    Soft delete records of kind matching record_filter and their dependents.
    """
    ret = _envelope()
    executor = _executor(session, max_depth)
    update_body = {
        vb.IS_DELETED: True,
        vb.UPDATED_BY: actor_id
    }
    result = executor.cascade_soft_delete(kind, record_filter, update_body, dry_run=dry_run)
    return _cascade_result(ret, result)


def delete(kind, record_filter, session, is_warning=False, dry_run=False, max_depth=None):
    """
    Delete records of kind matching record_filter and their dependents.
    With is_warning nothing is deleted: the direct dependents are counted instead.
    """
    ret = _envelope()
    executor = _executor(session, max_depth)
    if is_warning:
        counts = executor.cascade_count(kind, record_filter)
        if counts == {kind: 0}:
            return _cascade_result(ret, NoRecordsFound(kind))
        ret[vb.DB_ACTION_OUTPUT] = counts
        return _finish(ret)
    result = executor.cascade_delete(kind, record_filter, dry_run=dry_run)
    return _cascade_result(ret, result)


def _executor(session, max_depth):
    if max_depth is None:
        return CascadeExecutor(RecordStore(session))
    return CascadeExecutor(RecordStore(session), max_depth=max_depth)
