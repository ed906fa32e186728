import uuid

from databricks.sdk import WorkspaceClient
from sqlalchemy.engine import URL

from sales_dashboard.app_logging import get_logger
from sales_dashboard.config import get_config

LAKEBASE_PORT = 5432

class DatabricksAuthentication:
    """Handles Databricks authentication, client creation and Lakebase credentials using AppConfig singleton."""
    def __init__(self) -> None:
        """Initializes the authentication handler using the singleton AppConfig."""
        self.config = get_config()
        self.logger = get_logger(__name__)

    def get_databricks_config(self):
        """Creates a Databricks SDK Config object from AppConfig values.

        Returns:
            DatabricksConfig: The Databricks SDK config object.
        Raises:
            RuntimeError: If required configuration is missing.
        """
        from databricks.sdk.core import Config as DatabricksConfig
        if self.config.databricks_client_id and self.config.databricks_client_secret:
            self.logger.info("Configuring Databricks Apps authentication with service principal")
            return DatabricksConfig(
                host=self.config.databricks_host,
                client_id=self.config.databricks_client_id,
                client_secret=self.config.databricks_client_secret,
            )
        elif self.config.databricks_host and self.config.databricks_token:
            self.logger.info("Configuring Databricks authentication with manual token")
            return DatabricksConfig(
                host=self.config.databricks_host,
                token=self.config.databricks_token,
            )
        elif self.config.databricks_config_profile:
            self.logger.info(f"Configuring Databricks authentication with profile {self.config.databricks_config_profile}")
            return DatabricksConfig(profile=self.config.databricks_config_profile)
        elif self.config.databricks_host:
            self.logger.info("Configuring Databricks authentication with CLI")
            return DatabricksConfig(host=self.config.databricks_host)
        else:
            self.logger.error("Missing Databricks configuration values.")
            raise RuntimeError("Missing Databricks configuration values.")

    def get_workspace_client(self) -> WorkspaceClient:
        """Returns an authenticated Databricks WorkspaceClient.

        Returns:
            WorkspaceClient: The Databricks WorkspaceClient instance.
        """
        config = self.get_databricks_config()
        self.logger.info(f"Instantiating WorkspaceClient for host: {self.config.databricks_host}")
        return WorkspaceClient(config=config)

    def get_lakebase_url(self, instance_name: str, database: str) -> URL:
        """Builds a SQLAlchemy URL for a Lakebase (Postgres) instance.

        The password is a short-lived database credential minted for the
        current identity, so the URL should be rebuilt when it expires.

        Args:
            instance_name (str): Lakebase database instance name.
            database (str): Postgres database to connect to.
        Returns:
            URL: SQLAlchemy URL using the psycopg2 driver with TLS required.
        """
        client = self.get_workspace_client()
        instance = client.database.get_database_instance(name=instance_name)
        credential = client.database.generate_database_credential(
            request_id=str(uuid.uuid4()),
            instance_names=[instance_name],
        )
        user = self.config.databricks_client_id or client.current_user.me().user_name
        self.logger.info(f"Connecting to Lakebase instance {instance_name} at {instance.read_write_dns}")
        return URL.create(
            "postgresql+psycopg2",
            username=user,
            password=credential.token,
            host=instance.read_write_dns,
            port=LAKEBASE_PORT,
            database=database,
            query={"sslmode": "require"},
        )

def get_databricks_auth() -> DatabricksAuthentication:
    """Returns a new DatabricksAuthentication instance using the latest config."""
    return DatabricksAuthentication()
