"""
Blueprints of the admin panel API
"""
from . import entity
from . import meta

blueprints = [*entity.blueprints, meta.bp]
