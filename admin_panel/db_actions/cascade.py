"""
Cascading delete, soft delete and dependent counting over the reference graph.
"""
# Standard library
import logging

# Third-party
from sqlalchemy.exc import SQLAlchemyError

# Local modules
from .errors import Error, CascadeError, CascadeDepthError, RequestError
from .graph import CASCADE_MAP, dependent_kinds, inbound_edges
from .. import vocabulary as vb

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100


class NoRecordsFound:
    """
    Result of a cascade whose root filter matched no record.
    Kept distinct from 0, which means records matched but nothing was affected.
    """
    def __init__(self, kind):
        self.kind = kind
        self.message = f"No {kind} found."

    def __eq__(self, other):
        return isinstance(other, NoRecordsFound) and other.kind == self.kind

    def __hash__(self):
        return hash((NoRecordsFound, self.kind))

    def __repr__(self):
        return f"NoRecordsFound({self.kind!r})"


class CascadeExecutor:
    """
    Walks the reference graph from a root entity kind and a filter.

    Dependents are resolved from the root ids before anything is touched and
    are always acted on before the root. Each (kind, id) is processed at most
    once per top-level call, which makes self references (a user added by
    itself) terminate. Each top-level call is one transaction on the store's
    session: committed on success, rolled back on failure or when dry_run.
    """

    def __init__(self, store, cascade_map=None, max_depth=DEFAULT_MAX_DEPTH):
        self.store = store
        self.cascade_map = CASCADE_MAP if cascade_map is None else cascade_map
        self.max_depth = max_depth

    @property
    def session(self):
        return self.store.session

    def cascade_delete(self, kind, record_filter, dry_run=False):
        """
        Hard delete records of kind matching record_filter and everything
        depending on them. Returns the number of root rows deleted or
        NoRecordsFound.
        """
        return self._run(kind, record_filter, self._destroy, dry_run)

    def cascade_soft_delete(self, kind, record_filter, update_body, default_values=None, dry_run=False):
        """
        Soft delete records of kind matching record_filter and everything
        depending on them with update_body (is_deleted and updated_by).
        default_values are merged into the patch of the root records only.
        Returns the number of root rows updated or NoRecordsFound.
        """
        root_patch = {**update_body, **(default_values or {})}
        for patch in (update_body, root_patch):
            if patch.get(vb.IS_DELETED) is not True:
                raise RequestError(f"Soft delete requires '{vb.IS_DELETED}' to be true")

        def soft_delete(kind, id_filter):
            return self.store.update(kind, id_filter, update_body)

        def soft_delete_root(kind, id_filter):
            return self.store.update(kind, id_filter, root_patch)

        return self._run(kind, record_filter, soft_delete, dry_run, root_action=soft_delete_root)

    def cascade_count(self, kind, record_filter):
        """
        Counts the direct dependents of the records of kind matching
        record_filter, per dependent kind. Grandchildren are not counted.
        A kind nothing depends on counts its own matching records.
        """
        dependents = dependent_kinds(kind, self.cascade_map)
        try:
            if not dependents:
                return {kind: self.store.count(kind, record_filter)}

            ids = self.store.find_ids(kind, record_filter)
            if not ids:
                return {kind: 0}

            return {
                child: self.store.count(child, {vb.OR: [{field: ids} for field in fields]})
                for child, fields in dependents.items()
            }
        except SQLAlchemyError as error:
            logger.error("Counting dependents of '%s' failed: %s", kind, error)
            raise CascadeError(kind=kind, error=error) from error

    def _run(self, kind, record_filter, action, dry_run, root_action=None):
        try:
            result = self._walk(kind, record_filter, action, visited=set(), depth=0, root_action=root_action)
            if dry_run:
                logger.info("Dry run of cascade on '%s', rolling back", kind)
                self.session.rollback()
            else:
                self.session.commit()
        except SQLAlchemyError as error:
            self.session.rollback()
            logger.error("Cascade on '%s' failed: %s", kind, error)
            raise CascadeError(kind=kind, error=error) from error
        except Error:
            self.session.rollback()
            raise
        return result

    def _walk(self, kind, record_filter, action, visited, depth, root_action=None):
        ids = self.store.find_ids(kind, record_filter)
        if not ids:
            return NoRecordsFound(kind)

        fresh = [record_id for record_id in ids if (kind, record_id) not in visited]
        if not fresh:
            logger.debug("'%s' with id %s already processed, skipping", kind, ids)
            return 0
        if depth > self.max_depth:
            raise CascadeDepthError(kind=kind, depth=self.max_depth)
        visited.update((kind, record_id) for record_id in fresh)

        for edge in inbound_edges(kind, self.cascade_map):
            logger.info(f"Cascading from {kind} ids={fresh} to {edge.child} by {edge.field}")
            self._walk(edge.child, {edge.field: fresh}, action, visited, depth + 1)

        return (root_action or action)(kind, {vb.ID: fresh})

    def _destroy(self, kind, id_filter):
        return self.store.destroy(kind, id_filter)
