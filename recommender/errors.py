"""Exception hierarchy shared by the core and the service backends."""


class SurveyError(Exception):
    """Base class for recoverable, request-scoped failures."""


class UpstreamError(SurveyError):
    """A collaborator (recommendation service, catalog) was unavailable or answered badly."""


class RecommendationServiceError(UpstreamError):
    pass


class CatalogError(UpstreamError):
    pass


class PersistenceError(SurveyError):
    """Writing to or reading from the analytics store failed."""
