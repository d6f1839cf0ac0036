"""
Meta API: version and cascade graph
"""
import logging

from flask import Blueprint, jsonify

from .. import __version__
from .. import db_actions

logger = logging.getLogger(__name__)

bp = Blueprint('meta', __name__)

@bp.route('/version', methods=['GET'])
def get_version():
    """
    Get the current version of the application.
    """
    return jsonify({"version": __version__.__version__})

@bp.route('/cascade_map', methods=['GET'])
@bp.route('/cascade_map/<string:kind>', methods=['GET'])
def cascade_map(kind=None):
    """
    Dependents reached when deleting records, for every entity or for one.
    Returns: {entity: {dependent entity: [referencing columns]}}
    """
    if kind is not None:
        db_actions.model_for(kind)
        return jsonify({kind: db_actions.dependent_kinds(kind)})
    return jsonify({
        parent: db_actions.dependent_kinds(parent)
        for parent in db_actions.CASCADE_MAP
    })
