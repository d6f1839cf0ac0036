"""
Reference graph: which records depend on which.

Each entry of CASCADE_MAP lists, for a referenced entity, the dependent
entities and the column through which they point at it. Audit columns
(added_by, updated_by) are references to user like any foreign key.
"""
from collections import namedtuple

from .. import vocabulary as vb

Edge = namedtuple("Edge", ["child", "field", "parent"])

CASCADE_MAP = {
    vb.USER: {
        'children': [
            {'entity': vb.BLOG, 'field': vb.UPDATED_BY},
            {'entity': vb.BLOG, 'field': vb.ADDED_BY},
            {'entity': vb.USER, 'field': vb.ADDED_BY},
            {'entity': vb.USER, 'field': vb.UPDATED_BY},
            {'entity': vb.USER_AUTH_SETTINGS, 'field': vb.USER_ID},
            {'entity': vb.USER_AUTH_SETTINGS, 'field': vb.ADDED_BY},
            {'entity': vb.USER_AUTH_SETTINGS, 'field': vb.UPDATED_BY},
            {'entity': vb.USER_TOKEN, 'field': vb.USER_ID},
            {'entity': vb.USER_TOKEN, 'field': vb.ADDED_BY},
            {'entity': vb.USER_TOKEN, 'field': vb.UPDATED_BY},
            {'entity': vb.USER_ROLE, 'field': vb.USER_ID},
        ]
    },
    vb.ROLE: {
        'children': [
            {'entity': vb.ROUTE_ROLE, 'field': vb.ROLE_ID},
            {'entity': vb.USER_ROLE, 'field': vb.ROLE_ID},
        ]
    },
    vb.PROJECT_ROUTE: {
        'children': [
            {'entity': vb.ROUTE_ROLE, 'field': vb.ROUTE_ID},
        ]
    },
}


def edges(cascade_map=None):
    """
    All edges of the graph, in declaration order.
    """
    if cascade_map is None:
        cascade_map = CASCADE_MAP
    return [
        Edge(child['entity'], child['field'], parent)
        for parent, cascade_info in cascade_map.items()
        for child in cascade_info.get('children', [])
    ]


def inbound_edges(kind, cascade_map=None):
    """
    Edges pointing at kind, in declaration order.
    """
    return [edge for edge in edges(cascade_map) if edge.parent == kind]


def dependent_kinds(kind, cascade_map=None):
    """
    Maps every entity depending on kind to the list of its referencing columns,
    in declaration order.
    """
    dependents = {}
    for edge in inbound_edges(kind, cascade_map):
        dependents.setdefault(edge.child, []).append(edge.field)
    return dependents


def check_cascade_map(models, cascade_map=None):
    """
    Returns the edges whose entity or column does not exist in models.
    """
    broken = []
    for edge in edges(cascade_map):
        for kind, field in ((edge.child, edge.field), (edge.parent, vb.ID)):
            the_table = models.get(kind)
            if the_table is None or field not in the_table.__table__.columns:
                broken.append(edge)
                break
    return broken
