"""
OpenAPI description of the HTTP routes, served at <mount point>/docs.
"""

TITLE = 'plebiscito reader'
VERSION = '0.1.0'

# (path below the mount point, summary); {names} are path parameters
ROUTES = [
    ('/def/zones', 'Zone types, from the whole country down to polling tables'),
    ('/def/elec', 'Elections'),
    ('/def/ambit', 'Ambits an election is counted in'),
    ('/check/files', 'Files published in the remote listing'),
    ('/check/not-copy', 'Remote files with no copy among the schema files'),
    ('/check/scenery/{zone}', 'Schema files for one zone'),
    ('/check/data/{zone}', 'Members of a zone'),
    ('/check/data/{zone}/filter/{type}', 'Members of a zone of one type'),
    ('/result/all', 'Every result row'),
    ('/result/filter/{key}/{value}', 'Result rows matching one field'),
    ('/result/filter/{key}/{value}/{key2}/{value2}', 'Result rows matching two fields'),
    ('/search/by/{complexId}', 'Result rows for a complex id'),
    ('/search/by/type/{type}', 'Result rows for a zone type'),
    ('/search/by/type/{type}/{id}', 'Result rows for one zone of a type'),
]

RESET_CACHE = {
    'name': 'resetCache',
    'in': 'query',
    'required': False,
    'description': "'true' recomputes the value and overwrites the cached entry",
    'schema': {'type': 'string', 'enum': ['true']},
}

ENVELOPE = {
    'type': 'object',
    'required': ['data', 'redis'],
    'properties': {
        'data': {},
        'redis': {'type': 'boolean', 'description': 'Served from the cache'},
        'ttl': {'type': 'integer', 'description': 'Seconds left on the cached entry'},
    },
}

ERROR = {
    'type': 'object',
    'properties': {'error': {'type': 'string'}},
}


def _path_parameters(path: str) -> list[dict]:
    names = [part[1:-1] for part in path.split('/') if part.startswith('{')]
    return [{'name': name, 'in': 'path', 'required': True, 'schema': {'type': 'string'}}
            for name in names]


def _operation(path: str, summary: str) -> dict:
    def error(description):
        return {'description': description,
                'content': {'application/json': {'schema': ERROR}}}

    return {
        'get': {
            'summary': summary,
            'parameters': _path_parameters(path) + [RESET_CACHE],
            'responses': {
                '200': {'description': 'OK',
                        'content': {'application/json': {'schema': ENVELOPE}}},
                '400': error('A data root this route needs is not configured'),
                '404': error('Unknown zone, field or file'),
                '500': error('Unexpected provider failure'),
            },
        },
    }


def document(base_path: str) -> dict:
    """Build the OpenAPI 3 document for routes mounted under base_path."""
    paths = {base_path + path: _operation(path, summary) for path, summary in ROUTES}
    paths[base_path + '/health'] = {
        'get': {
            'summary': 'Liveness and configured backing services',
            'responses': {'200': {'description': 'OK'}},
        },
    }
    return {
        'openapi': '3.0.3',
        'info': {'title': TITLE, 'version': VERSION},
        'paths': paths,
    }
