from app.repositories.interfaces.test_case_sink import ITestCaseSink
from app.repositories.implementations.http_test_case_sink import HttpTestCaseSink

from app.core.cache import IMPORT_PREVIEW_CACHE
from app.services.import_service import ImportService


class Container:
    """Dependency injection container"""

    def __init__(self):
        self._test_case_sink = None

    def test_case_sink(self) -> ITestCaseSink:
        """Get persistence sink instance (singleton)"""
        if self._test_case_sink is None:
            self._test_case_sink = HttpTestCaseSink()
        return self._test_case_sink

    def import_service(self) -> ImportService:
        """Get import service instance"""
        return ImportService(
            sink=self.test_case_sink(),
            preview_cache=IMPORT_PREVIEW_CACHE,
        )


# Global container instance
container = Container()


# Dependency providers for FastAPI
def get_test_case_sink() -> ITestCaseSink:
    """FastAPI dependency for the persistence sink"""
    return container.test_case_sink()


def get_import_service() -> ImportService:
    """FastAPI dependency for the import service"""
    return container.import_service()
