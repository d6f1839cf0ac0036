"""
Entity API

One blueprint per entity kind, all built by create_blueprint, mounted at
/<kind> (e.g. /user, /role, /project_route).
"""
import functools
import logging

from flask import Blueprint, request, jsonify, g

from .. import db_actions
from .. import vocabulary as vb
from ..database import session_scope, cascade_max_depth
from ..model import MODELS
from ..schema import serialize

logger = logging.getLogger(__name__)

# Kinds whose records the acting user may not list or delete when they are the record
SELF_GUARDED_KINDS = (vb.USER,)

# Columns a user never changes on their own profile
PROFILE_IGNORED_COLUMNS = (vb.PASSWORD, vb.CREATED_AT, vb.UPDATED_AT)


def get_json_data(required=True):
    """
    Parsed JSON body of the request.

    Returns:
        dict: Parsed JSON data if successful.
        None: If the JSON is invalid, or missing while required.
    """
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        if required:
            logger.warning("Invalid JSON data on %s", request.path)
            return None
        return {}
    logger.debug(f"Received JSON data: {data}")
    return data


def require_actor(func):
    """
    Rejects the request when the acting user id is missing or malformed.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if g.get('actor_error'):
            return jsonify({vb.DB_ACTION_ERROR: g.actor_error}), 400
        if g.get('actor_id') is None:
            return jsonify({vb.DB_ACTION_ERROR: f"'{vb.ACTOR_HEADER}' header is required"}), 401
        return func(*args, **kwargs)
    return wrapper


def scope_filter(kind, record_filter):
    """
    Excludes the acting user from a filter on a self guarded kind.
    """
    if kind not in SELF_GUARDED_KINDS:
        return record_filter
    not_self = {vb.ID: {"ne": g.actor_id}}
    if not record_filter:
        return not_self
    return {vb.AND: [record_filter, not_self]}


def ids_filter(data):
    """
    Filter on the "ids" list of the request body, None if it is missing or malformed.
    """
    ids = data.get(vb.IDS)
    if not isinstance(ids, list) or not ids or not all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
        return None
    return {vb.ID: ids}


def respond(result):
    """
    Serializes the records of a db_actions result. An output of None means the
    targeted records were not found.
    """
    output = result.get(vb.DB_ACTION_OUTPUT)
    if isinstance(output, list):
        result[vb.DB_ACTION_OUTPUT] = serialize(output)
    if output is None:
        return jsonify(result), 404
    return jsonify(result)


def bad_request(message):
    return jsonify({vb.DB_ACTION_ERROR: message}), 400


def create_blueprint(kind):
    """
    Blueprint exposing the record and cascade actions of one entity kind.
    """
    bp = Blueprint(kind, __name__, url_prefix=f'/{kind}')

    @bp.route('/create', methods=['POST'])
    @require_actor
    def create():
        """
        POST: JSON record to create, added_by is the acting user.
        Returns: the created record.
        """
        data = get_json_data()
        if data is None:
            return bad_request("Invalid JSON data")
        with session_scope() as session:
            return respond(db_actions.add(kind, data, actor_id=g.actor_id, session=session))

    @bp.route('/add_bulk', methods=['POST'])
    @require_actor
    def add_bulk():
        """
        POST: {"data": [records]}
        Returns: the created records.
        """
        data = get_json_data()
        if data is None:
            return bad_request("Invalid JSON data")
        with session_scope() as session:
            return respond(db_actions.add_bulk(kind, data.get(vb.DATA), actor_id=g.actor_id, session=session))

    @bp.route('/list', methods=['POST'])
    @require_actor
    def list_records():
        """
        POST: {"query": filter, "is_count_only": false}
        Returns: matching records, or {"total_records": n} when is_count_only.
        """
        data = get_json_data(required=False)
        record_filter = scope_filter(kind, data.get(vb.QUERY))
        with session_scope() as session:
            return respond(db_actions.find_all(
                kind,
                record_filter,
                session=session,
                count_only=bool(data.get(vb.IS_COUNT_ONLY, False))
            ))

    @bp.route('/count', methods=['POST'])
    @require_actor
    def count():
        """
        POST: {"where": filter}
        Returns: {"total_records": n}
        """
        data = get_json_data(required=False)
        with session_scope() as session:
            return respond(db_actions.count(kind, data.get(vb.WHERE), session=session))

    @bp.route('/<int:record_id>', methods=['GET'])
    @require_actor
    def get(record_id: int):
        """
        GET: one record by id.
        """
        with session_scope() as session:
            return respond(db_actions.get(kind, record_id, session=session))

    @bp.route('/update/<int:record_id>', methods=['PUT'])
    @require_actor
    def update(record_id: int):
        """
        PUT: JSON record replacing the record with id, required columns included.
        Returns: the updated record.
        """
        data = get_json_data()
        if data is None:
            return bad_request("Invalid JSON data")
        with session_scope() as session:
            return respond(db_actions.update(kind, record_id, data, actor_id=g.actor_id, session=session))

    @bp.route('/partial_update/<int:record_id>', methods=['PUT'])
    @require_actor
    def partial_update(record_id: int):
        """
        PUT: JSON columns to change on the record with id.
        Returns: the updated record.
        """
        data = get_json_data()
        if data is None:
            return bad_request("Invalid JSON data")
        with session_scope() as session:
            return respond(db_actions.update(kind, record_id, data, actor_id=g.actor_id, session=session, partial=True))

    @bp.route('/update_bulk', methods=['PUT'])
    @require_actor
    def update_bulk():
        """
        PUT: {"filter": filter, "data": columns}
        Returns: number of records updated.
        """
        data = get_json_data()
        if data is None:
            return bad_request("Invalid JSON data")
        with session_scope() as session:
            return respond(db_actions.update_bulk(
                kind,
                data.get(vb.FILTER) or {},
                data.get(vb.DATA),
                actor_id=g.actor_id,
                session=session
            ))

    @bp.route('/soft_delete/<int:record_id>', methods=['PUT'])
    @require_actor
    def soft_delete(record_id: int):
        """
        PUT: soft delete the record with id and everything depending on it.
        Optional: "dry_run": true to roll back once done.
        Returns: number of records soft deleted at the root.
        """
        data = get_json_data(required=False)
        with session_scope() as session:
            return respond(db_actions.soft_delete(
                kind,
                scope_filter(kind, {vb.ID: record_id}),
                actor_id=g.actor_id,
                session=session,
                dry_run=bool(data.get(vb.DRY_RUN, False)),
                max_depth=cascade_max_depth()
            ))

    @bp.route('/soft_delete_many', methods=['PUT'])
    @require_actor
    def soft_delete_many():
        """
        PUT: {"ids": [ids]} soft delete the records and everything depending on them.
        Optional: "dry_run": true to roll back once done.
        Returns: number of records soft deleted at the root.
        """
        data = get_json_data()
        if data is None:
            return bad_request("Invalid JSON data")
        record_filter = ids_filter(data)
        if record_filter is None:
            return bad_request(f"'{vb.IDS}' has to be a non empty list of integers")
        with session_scope() as session:
            return respond(db_actions.soft_delete(
                kind,
                scope_filter(kind, record_filter),
                actor_id=g.actor_id,
                session=session,
                dry_run=bool(data.get(vb.DRY_RUN, False)),
                max_depth=cascade_max_depth()
            ))

    @bp.route('/delete/<int:record_id>', methods=['DELETE'])
    @require_actor
    def delete(record_id: int):
        """
        DELETE: delete the record with id and everything depending on it.
        Optional: "is_warning": true to only count the direct dependents,
        "dry_run": true to roll back once done.
        Returns: number of records deleted at the root, or dependent counts.
        """
        data = get_json_data(required=False)
        with session_scope() as session:
            return respond(db_actions.delete(
                kind,
                scope_filter(kind, {vb.ID: record_id}),
                session=session,
                is_warning=bool(data.get(vb.IS_WARNING, False)),
                dry_run=bool(data.get(vb.DRY_RUN, False)),
                max_depth=cascade_max_depth()
            ))

    @bp.route('/delete_many', methods=['POST'])
    @require_actor
    def delete_many():
        """
        POST: {"ids": [ids]} delete the records and everything depending on them.
        Optional: "is_warning": true to only count the direct dependents,
        "dry_run": true to roll back once done.
        Returns: number of records deleted at the root, or dependent counts.
        """
        data = get_json_data()
        if data is None:
            return bad_request("Invalid JSON data")
        record_filter = ids_filter(data)
        if record_filter is None:
            return bad_request(f"'{vb.IDS}' has to be a non empty list of integers")
        with session_scope() as session:
            return respond(db_actions.delete(
                kind,
                scope_filter(kind, record_filter),
                session=session,
                is_warning=bool(data.get(vb.IS_WARNING, False)),
                dry_run=bool(data.get(vb.DRY_RUN, False)),
                max_depth=cascade_max_depth()
            ))

    if kind == vb.USER:
        add_profile_routes(bp)

    return bp


def add_profile_routes(bp):
    """
    Routes acting on the acting user's own row.
    """
    @bp.route('/me', methods=['GET'])
    @require_actor
    def me():
        """
        GET: the acting user, unless deleted or inactive.
        """
        with session_scope() as session:
            return respond(db_actions.find_one(
                vb.USER,
                {vb.ID: g.actor_id, vb.IS_DELETED: False, vb.IS_ACTIVE: True},
                session=session
            ))

    @bp.route('/update_profile', methods=['PUT'])
    @require_actor
    def update_profile():
        """
        PUT: JSON columns to change on the acting user.
        password, created_at and updated_at are ignored.
        Returns: the updated user.
        """
        data = get_json_data()
        if data is None:
            return bad_request("Invalid JSON data")
        data = {key: value for key, value in data.items() if key not in PROFILE_IGNORED_COLUMNS}
        with session_scope() as session:
            return respond(db_actions.update(
                vb.USER,
                g.actor_id,
                data,
                actor_id=g.actor_id,
                session=session,
                partial=True
            ))


blueprints = [create_blueprint(kind) for kind in MODELS]
