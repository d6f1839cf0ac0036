"""
Admin panel CRUD API
"""
import logging
import os
from collections import defaultdict
from datetime import datetime, timezone

from flask import Flask, request, make_response, jsonify, g

from . import db_actions
from . import api
from . import database
from . import vocabulary as vb


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True, static_folder=None)
    app.url_map.strict_slashes = False

    if app.config['DEBUG']:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(os.getenv('LOG_LEVEL', 'INFO'))

    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s %(threadName)s: %(message)s'
    )

    app.config.from_mapping(
        SQLALCHEMY_DATABASE_URI=f'sqlite:///{os.path.join(app.instance_path, "admin_panel_db.sql")}',
        CASCADE_MAX_DEPTH=db_actions.cascade.DEFAULT_MAX_DEPTH,
    )
    app.config.from_prefixed_env("ADMIN_PANEL")

    if test_config is None:
        app.config.from_pyfile('config.py', silent=True)
    else:
        app.config.from_mapping(test_config)

    logging.debug(f'SQLALCHEMY_DATABASE_URI: {app.config["SQLALCHEMY_DATABASE_URI"]}')

    try:
        os.makedirs(app.instance_path)
    except OSError:
        pass

    @app.before_request
    def capture_actor():
        """
        Extract the acting user id from the request header if present.
        Authentication happens upstream, the header is trusted.
        """
        g.actor_id = None
        g.actor_error = None
        actor = request.headers.get(vb.ACTOR_HEADER)
        if actor is not None:
            try:
                g.actor_id = int(actor)
            except ValueError:
                g.actor_error = f"'{vb.ACTOR_HEADER}' has to be an integer, got '{actor}'"

    @app.after_request
    def after_request(response):
        """
        Logging after every request.
        """
        logger = logging.getLogger("app.access")
        actor_id = getattr(g, 'actor_id', None)

        logger.info(
            "%s [%s] %s %s %s %s %s %s %s [actor=%s]",
            request.remote_addr,
            datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            request.method,
            request.path,
            request.scheme,
            response.status,
            response.content_length,
            request.referrer,
            request.user_agent,
            actor_id
        )
        return response

    @app.errorhandler(db_actions.Error)
    def handle_exception(e):
        return jsonify(e.to_dict()), e.status_code

    @app.route('/')
    def welcome():
        return 'Welcome to the admin panel API!'

    for bp in api.blueprints:
        app.register_blueprint(bp)

    @app.route('/help')
    def help():
        endpoint = defaultdict(lambda: defaultdict(list))
        links = []
        for rule in app.url_map.iter_rules():
            endpoint[rule.endpoint]['rule'].append(rule.rule)
            endpoint[rule.endpoint]['doc'] = app.view_functions[rule.endpoint].__doc__

        for _, value in endpoint.items():
            links.append(
                """----------
URL:
        {}
DOC: {}
""".format('\n\t'.join(value['rule']), value['doc'])
            )

        response = make_response('\n'.join(links), 200)
        response.headers["content-type"] = "text/plain"
        return response

    database.init_app(app)

    return app
