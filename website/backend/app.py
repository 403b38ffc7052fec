import os
import sys
import time
import traceback

import cherrypy
from dotenv import load_dotenv

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../..'))

from plebiscito import queries  # noqa: E402
from plebiscito.cache import Cache, NoOpCache  # noqa: E402
from plebiscito.config import Settings  # noqa: E402
from plebiscito.cors import cors_headers  # noqa: E402
from plebiscito.errors import DataProviderError  # noqa: E402
from plebiscito.openapi import document  # noqa: E402
from plebiscito.storage import open_storage  # noqa: E402
from plebiscito.utils import say  # noqa: E402

MOUNT_POINT = '/api'


def _reset_requested(reset_cache) -> bool:
    # Only the literal 'true' forces a recompute; '1', 'yes' and friends do not
    return reset_cache is not None and str(reset_cache).lower() == 'true'


def _echo_cors(allow_list=()):
    headers = cors_headers(cherrypy.request.headers.get('Referer'), allow_list)
    cherrypy.response.headers.update(headers)


class ResponseTimeTool(cherrypy.Tool):
    """Adds an X-Response-Time header (milliseconds) to every response."""

    def __init__(self):
        super().__init__('on_start_resource', self._start, priority=10)

    def _setup(self):
        super()._setup()
        cherrypy.request.hooks.attach('before_finalize', self._finish, priority=90)

    @staticmethod
    def _start():
        cherrypy.request.response_timer = time.perf_counter()

    @staticmethod
    def _finish():
        start = getattr(cherrypy.request, 'response_timer', None)
        if start is not None:
            elapsed = (time.perf_counter() - start) * 1000
            cherrypy.response.headers['X-Response-Time'] = f'{elapsed:.3f}ms'


cherrypy.tools.cors = cherrypy.Tool('before_handler', _echo_cors)
cherrypy.tools.response_time = ResponseTimeTool()


class RouteGroup:
    """Resolves queries through the cache and wraps them in the response envelope."""

    def __init__(self, settings: Settings, cache: Cache):
        self.settings = settings
        self.cache = cache

    def _serve(self, query: queries.Query, reset_cache):
        try:
            # A misconfigured service must not keep answering from old entries
            query.check_configured()
            fetched = self.cache.resolve(query.key, query.produce,
                                         bypass=_reset_requested(reset_cache),
                                         ttl=self.settings.cache_ttl)
        except DataProviderError as e:
            say(f'Data provider error for {query.key}', e)
            cherrypy.response.status = e.status
            return {'error': str(e)}
        except Exception as e:
            say(f'API error for {query.key}', e)
            traceback.print_exc()
            cherrypy.response.status = 500
            return {'error': str(e)}

        body = {'data': fetched.value, 'redis': fetched.from_cache}
        if fetched.ttl is not None:
            body['ttl'] = fetched.ttl
        return body


class ZoneDefinitions(RouteGroup):
    @cherrypy.expose
    @cherrypy.tools.json_out()
    def zones(self, resetCache=None, **_query):
        """GET /api/def/zones"""
        return self._serve(queries.zones(), resetCache)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def elec(self, resetCache=None, **_query):
        """GET /api/def/elec"""
        return self._serve(queries.elections(), resetCache)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def ambit(self, resetCache=None, **_query):
        """GET /api/def/ambit"""
        return self._serve(queries.ambits(), resetCache)


class Listing(RouteGroup):
    @cherrypy.expose
    @cherrypy.tools.json_out()
    def files(self, resetCache=None, **_query):
        """GET /api/check/files"""
        return self._serve(queries.files(self.settings), resetCache)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def not_copy(self, resetCache=None, **_query):
        """GET /api/check/not-copy"""
        return self._serve(queries.not_copied(self.settings), resetCache)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def scenery(self, zone, resetCache=None, **_query):
        """GET /api/check/scenery/<zone>"""
        return self._serve(queries.scenery(self.settings, zone), resetCache)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def data(self, zone, *rest, resetCache=None, **_query):
        """GET /api/check/data/<zone> and /api/check/data/<zone>/filter/<type>"""
        if not rest:
            return self._serve(queries.zone_data(self.settings, zone), resetCache)
        if len(rest) == 2 and rest[0] == 'filter':
            return self._serve(queries.zone_data(self.settings, zone, rest[1]), resetCache)
        raise cherrypy.NotFound()


class Results(RouteGroup):
    @cherrypy.expose
    @cherrypy.tools.json_out()
    def all(self, resetCache=None, **_query):
        """GET /api/result/all"""
        return self._serve(queries.all_results(self.settings), resetCache)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def filter(self, *params, resetCache=None, **_query):
        """GET /api/result/filter/<key>/<value>[/<key>/<value>]"""
        if len(params) not in (2, 4):
            raise cherrypy.NotFound()
        return self._serve(queries.filtered_results(self.settings, *params), resetCache)


class Search(RouteGroup):
    @cherrypy.expose
    @cherrypy.tools.json_out()
    def by(self, *path, resetCache=None, **_query):
        """GET /api/search/by/<complexId>, /by/type/<type> and /by/type/<type>/<id>"""
        if len(path) == 1:
            return self._serve(queries.search(self.settings, path[0]), resetCache)
        if len(path) in (2, 3) and path[0] == 'type':
            return self._serve(queries.search_by_type(self.settings, *path[1:]), resetCache)
        raise cherrypy.NotFound()


class PlebiscitoAPI:
    def __init__(self, settings: Settings, cache: Cache):
        self.settings = settings
        self.cache = cache

        # 'def' is a keyword, so this route group can only be attached by name
        setattr(self, 'def', ZoneDefinitions(settings, cache))
        self.check = Listing(settings, cache)
        self.result = Results(settings, cache)
        self.search = Search(settings, cache)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def health(self):
        """GET /api/health: liveness plus which backing services are configured."""
        return {
            'status': 'ok',
            'cache': self.cache.storage is not None,
            'files': bool(self.settings.files_path),
            'schemas': bool(self.settings.schema_path),
        }

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def docs(self):
        """GET /api/docs: OpenAPI description of every route"""
        return document(cherrypy.request.script_name or MOUNT_POINT)


def create_app(settings=None):
    """Create and configure the CherryPy application"""
    if settings is None:
        settings = Settings.from_env()

    storage = open_storage(settings.cache_url)
    if storage is None:
        say('No cache URL configured, serving every request fresh')
        cache = NoOpCache()
    else:
        cache = Cache(storage)
        cherrypy.engine.subscribe('stop', storage.close)

    api = PlebiscitoAPI(settings, cache)

    conf = {
        '/': {
            'tools.cors.on': True,
            'tools.cors.allow_list': settings.cors_origins,
        },
        '/search': {
            'tools.response_time.on': True,
        },
    }

    return api, conf


_application = None


# "application" is the magic function called by uwsgi
def application(environ, start_response):
    global _application
    if _application is None:
        load_dotenv()
        api, conf = create_app()
        cherrypy.config.update({
            'log.screen': True,
            'environment': 'production',
            'tools.proxy.on': True,
        })
        _application = cherrypy.tree.mount(api, MOUNT_POINT, conf)
    return cherrypy.tree(environ, start_response)


if __name__ == '__main__':
    load_dotenv()
    settings = Settings.from_env()
    api, conf = create_app(settings)

    cherrypy.tree.mount(api, MOUNT_POINT, conf)
    cherrypy.config.update({
        'server.socket_host': '0.0.0.0',
        'server.socket_port': settings.port,
    })
    if not settings.dev_mode:
        cherrypy.config.update({'environment': 'production'})

    mode = 'DEVELOPMENT' if settings.dev_mode else 'PRODUCTION'
    say(f'Starting plebiscito reader API on port {settings.port} in {mode} mode')

    cherrypy.engine.start()
    cherrypy.engine.block()
