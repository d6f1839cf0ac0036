"""
Generic record access used by the cascade executor and the record actions.
"""
# Standard library
import logging

# Third-party
from sqlalchemy import select, func, delete, update

# Local modules
from .utils import model_for, build_conditions, coerce_values

logger = logging.getLogger(__name__)


class RecordStore:
    """
    Record access over one SQLAlchemy session, every call parameterized by an
    entity kind (table name) and a filter mapping (see utils.build_conditions).
    The store never commits: transactions belong to the caller.
    """

    def __init__(self, session):
        self.session = session

    def find_all(self, kind, record_filter=None):
        """Records of kind matching record_filter, ordered by id."""
        the_table = model_for(kind)
        stmt = (
            select(the_table)
            .where(*build_conditions(the_table, record_filter))
            .order_by(the_table.id)
        )
        return self.session.execute(stmt).scalars().all()

    def find_ids(self, kind, record_filter=None):
        """Ids of the records of kind matching record_filter, ordered."""
        the_table = model_for(kind)
        stmt = (
            select(the_table.id)
            .where(*build_conditions(the_table, record_filter))
            .order_by(the_table.id)
        )
        return self.session.execute(stmt).scalars().all()

    def count(self, kind, record_filter=None):
        the_table = model_for(kind)
        stmt = (
            select(func.count())
            .select_from(the_table)
            .where(*build_conditions(the_table, record_filter))
        )
        return self.session.execute(stmt).scalar_one()

    def destroy(self, kind, record_filter):
        """Hard delete, returns the number of rows removed."""
        the_table = model_for(kind)
        stmt = (
            delete(the_table)
            .where(*build_conditions(the_table, record_filter))
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        logger.debug("Destroyed %s row(s) of '%s' matching %s", result.rowcount, kind, record_filter)
        return result.rowcount

    def update(self, kind, record_filter, patch):
        """Applies patch to every matching record, returns the number of rows affected."""
        the_table = model_for(kind)
        stmt = (
            update(the_table)
            .where(*build_conditions(the_table, record_filter))
            .values(**coerce_values(the_table, patch))
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        logger.debug("Updated %s row(s) of '%s' matching %s", result.rowcount, kind, record_filter)
        return result.rowcount

    def get(self, kind, record_id):
        return self.session.get(model_for(kind), record_id)

    def create(self, kind, data):
        the_table = model_for(kind)
        record = the_table(**coerce_values(the_table, data))
        self.session.add(record)
        self.session.flush()
        return record

    def create_many(self, kind, data_list):
        the_table = model_for(kind)
        records = [the_table(**coerce_values(the_table, data)) for data in data_list]
        self.session.add_all(records)
        self.session.flush()
        return records
