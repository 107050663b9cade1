"""Fresh store creation."""

from loguru import logger

from boothdb.errors import BootstrapError
from boothdb.models.migration import SchemaVersion
from boothdb.ports.db_session import DbSessionPort
from boothdb.ports.version_store import VersionStorePort
from boothdb.storage import fresh_schema, seed
from boothdb.storage.version_store import Clock


class Bootstrapper:
    """
    Creates the latest schema directly on an empty store.

    Everything happens in one transaction: the schema, reference rows,
    default settings and the version marker either all land or none do.
    """

    def __init__(
        self,
        session: DbSessionPort,
        version_store: VersionStorePort,
        expected_version: int,
        *,
        schema_sql: str = fresh_schema.SCHEMA,
        schema_version: int = fresh_schema.SCHEMA_VERSION,
        seed_data: bool = True,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize Bootstrapper.

        Args:
            session: Open session on the (empty) store.
            version_store: Where the initial version is recorded.
            expected_version: Version the running code requires.
            schema_sql: Script defining the latest structure.
            schema_version: Version that script corresponds to.
            seed_data: Insert reference rows and default settings.
            clock: Timestamp source for seeded settings.
        """
        self._session = session
        self._version_store = version_store
        self._expected_version = expected_version
        self._schema_sql = schema_sql
        self._schema_version = schema_version
        self._seed_data = seed_data
        self._clock = clock

    async def create_fresh(self) -> SchemaVersion:
        """
        Create the store at the expected version.

        Raises:
            BootstrapError: If the fresh schema is out of step with the
                catalog, or anything fails while creating it. Nothing is
                committed in that case.
        """
        if self._schema_version != self._expected_version:
            raise BootstrapError(
                f"Fresh schema describes version {self._schema_version} "
                f"but the code expects version {self._expected_version}"
            )

        logger.info("Creating fresh store at schema version {}", self._expected_version)
        try:
            async with self._session.transaction():
                statements = await self._session.execute_script(self._schema_sql)
                if self._seed_data:
                    await seed.insert_reference_data(self._session)
                    await seed.insert_default_settings(self._session, clock=self._clock)
                record = await self._version_store.set_version(self._expected_version)
        except Exception as e:
            logger.error("Fresh store creation failed: {}", e)
            raise BootstrapError(f"Failed to create fresh store: {e}") from e

        logger.info(
            "Fresh store created: {} statements, version {}", statements, record.version
        )
        return record
