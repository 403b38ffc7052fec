"""
Static reference tables served by the zone definition endpoints.

ZONE_TYPES lists the territorial levels results are tallied at, from the
whole country down to polling tables. ELECTIONS and AMBITS describe the
electoral events and the scope each one is counted in.
"""

ZONE_TYPES = [
    {'id': 1, 'code': 'pais', 'name': 'País', 'parent': None},
    {'id': 2, 'code': 'region', 'name': 'Región', 'parent': 'pais'},
    {'id': 3, 'code': 'provincia', 'name': 'Provincia', 'parent': 'region'},
    {'id': 4, 'code': 'comuna', 'name': 'Comuna', 'parent': 'provincia'},
    {'id': 5, 'code': 'circunscripcion', 'name': 'Circunscripción Electoral', 'parent': 'comuna'},
    {'id': 6, 'code': 'local', 'name': 'Local de Votación', 'parent': 'circunscripcion'},
    {'id': 7, 'code': 'mesa', 'name': 'Mesa', 'parent': 'local'},
    {'id': 8, 'code': 'distrito', 'name': 'Distrito', 'parent': 'region'},
    {'id': 9, 'code': 'circunscripcion_senatorial', 'name': 'Circunscripción Senatorial', 'parent': 'pais'},
    {'id': 10, 'code': 'continente', 'name': 'Continente', 'parent': None},
    {'id': 11, 'code': 'pais_extranjero', 'name': 'País (Extranjero)', 'parent': 'continente'},
]

ELECTIONS = [
    {'id': 1, 'code': 'plebiscito', 'name': 'Plebiscito Constitucional', 'options': ['A favor', 'En contra']},
    {'id': 2, 'code': 'consejeros', 'name': 'Elección de Consejeros Constitucionales', 'options': []},
]

AMBITS = [
    {'id': 1, 'code': 'nacional', 'name': 'Nacional', 'zone_types': ['pais', 'region', 'provincia', 'comuna',
                                                                     'circunscripcion', 'local', 'mesa']},
    {'id': 2, 'code': 'extranjero', 'name': 'Extranjero', 'zone_types': ['continente', 'pais_extranjero',
                                                                         'local', 'mesa']},
    {'id': 3, 'code': 'total', 'name': 'Total', 'zone_types': ['pais']},
]
