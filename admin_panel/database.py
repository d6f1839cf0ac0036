"""Module providing database tables and operations support."""
import json
import logging
import os
from contextlib import contextmanager

import click
import flask
from flask.cli import with_appcontext
from sqlalchemy import (
    create_engine,
    )

from sqlalchemy.orm import sessionmaker, scoped_session

logger = logging.getLogger(__name__)


class Engine:
    ENGINE = None
    SESSION = None
    URI = None


def get_engine(db_uri):

    logger.debug('Connecting to %s', db_uri)

    # in tests the engines can be multiple...
    if Engine.ENGINE is None or Engine.URI != db_uri:
        Engine.ENGINE = create_engine(db_uri, echo=False)
        Engine.URI = db_uri

    return Engine.ENGINE


def get_session(no_app=False, db_uri=None):
    """
    The no app option is a convenience to get a DB session outside of a flask app
    """

    if no_app:
        if Engine.SESSION is None:
            if db_uri is None:
                db_uri = os.getenv("SQLALCHEMY_DATABASE_URI", default="sqlite+pysqlite:///:memory:")
            Engine.SESSION = sessionmaker(
                bind=get_engine(db_uri),
                autoflush=False
                )
        return Engine.SESSION()

    if 'session' not in flask.g:
        if db_uri is None:
            db_uri = flask.current_app.config["SQLALCHEMY_DATABASE_URI"]
        flask.g.session = scoped_session(
            sessionmaker(
                bind=get_engine(db_uri=db_uri),
                autoflush=False
                )
            )
    return flask.g.session


@contextmanager
def session_scope(no_app=False, db_uri=None):
    """
    Session committed when the block ends, rolled back if it raises.
    """
    session = get_session(no_app=no_app, db_uri=db_uri)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()  # Works for both scoped_session and regular session


def cascade_max_depth():
    """
    Maximum depth of a cascade, from the app config when there is one.
    """
    if flask.has_app_context():
        return flask.current_app.config.get("CASCADE_MAX_DEPTH")
    return None


def init_db(db_uri=None, flush=False):
    """
    db_uri is required if db is initialised outside of the flask app
    """
    from . import model
    if db_uri is None:
        try:
            db_uri = flask.current_app.config["SQLALCHEMY_DATABASE_URI"]
        except RuntimeError as e:
            logger.error("It seems that you are initialising the db outside of an app, please provide "
                         "the db_uri")
            raise e
    engine = get_engine(db_uri)

    if flush:
        model.Base.metadata.drop_all(engine)
    model.Base.metadata.create_all(engine)


def close_db(exception=None, no_app=False):
    """
    Drop the no app session factory or remove the app scoped session.
    exception is passed by flask teardown and not used.
    """
    if no_app:
        Engine.SESSION = None
        return

    session = flask.g.pop('session', None)
    if session is not None:
        session.remove()


@click.command('init-db')
@click.option('--db-uri', default=None)
@click.option('--flush', is_flag=True)
@with_appcontext
def init_db_command(db_uri=None, flush=False):
    """Create new tables
     WARNING: flush existing data if flush is true
     """
    if db_uri is None:
        db_uri = flask.current_app.config["SQLALCHEMY_DATABASE_URI"]
    init_db(db_uri, flush)
    click.echo('Database initialized')


@click.command('version')
def version_command():
    """Print the version of the API of the database"""
    from . import __version__
    click.echo(f"{__version__.__version__}")


@click.command('cascade')
@click.argument('kind')
@click.argument('ids', nargs=-1, type=int, required=True)
@click.option('--soft', is_flag=True, help='Soft delete instead of deleting')
@click.option('--actor', type=int, default=None, help='User id stamped as updated_by on soft delete')
@click.option('--warning', is_flag=True, help='Only count the direct dependents')
@click.option('--dry-run', is_flag=True, help='Run the cascade then roll it back')
@with_appcontext
def cascade_command(kind, ids, soft, actor, warning, dry_run):
    """Delete or soft delete records of KIND by IDS along with their dependents"""
    from . import db_actions
    if soft and actor is None:
        raise click.UsageError('--soft requires --actor')
    record_filter = {'id': list(ids)}
    try:
        with session_scope() as session:
            if soft:
                ret = db_actions.soft_delete(kind, record_filter, actor_id=actor, session=session,
                                             dry_run=dry_run, max_depth=cascade_max_depth())
            else:
                ret = db_actions.delete(kind, record_filter, session=session, is_warning=warning,
                                        dry_run=dry_run, max_depth=cascade_max_depth())
    except db_actions.Error as error:
        raise click.ClickException(error.message) from error
    click.echo(json.dumps(ret))


def init_app(app):
    app.teardown_appcontext(close_db)
    app.cli.add_command(init_db_command)
    app.cli.add_command(version_command)
    app.cli.add_command(cascade_command)
