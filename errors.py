class ExtrusionError(Exception):
    """Erreur de base pour la génération de mesh"""


class InvalidImageError(ExtrusionError, ValueError):
    """Image mal formée ou de surface nulle"""


class InvalidParametersError(ExtrusionError, ValueError):
    """Paramètres d'extrusion hors domaine"""


class TriangulationError(ExtrusionError, RuntimeError):
    pass
