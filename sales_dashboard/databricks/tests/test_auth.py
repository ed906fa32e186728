from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sales_dashboard.databricks.auth import DatabricksAuthentication
from sales_dashboard.config import set_config_for_test

class MockDatabricksConfig:
    def __init__(self, host=None, token=None, client_id=None, client_secret=None, profile=None):
        self.host = host
        self.token = token
        self.client_id = client_id
        self.client_secret = client_secret
        self.profile = profile

@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for var in [
        "DATABRICKS_HOST", "DATABRICKS_TOKEN", "DATABRICKS_CLIENT_ID", "DATABRICKS_CLIENT_SECRET",
        "DATABRICKS_CONFIG_PROFILE", "LAKEBASE_INSTANCE_NAME", "DATABASE_URL",
    ]:
        monkeypatch.delenv(var, raising=False)

@pytest.fixture(autouse=True)
def patch_sdk_config(monkeypatch):
    monkeypatch.setattr("databricks.sdk.core.Config", MockDatabricksConfig)
    yield

@pytest.fixture
def workspace_client(monkeypatch):
    """A WorkspaceClient stand-in answering the Lakebase calls."""
    client = MagicMock()
    client.database.get_database_instance.return_value = SimpleNamespace(
        read_write_dns="instance-123.database.cloud.databricks.com"
    )
    client.database.generate_database_credential.return_value = SimpleNamespace(token="short-lived-token")
    client.current_user.me.return_value = SimpleNamespace(user_name="analyst@example.com")
    monkeypatch.setattr(DatabricksAuthentication, "get_workspace_client", lambda self: client)
    return client

def test_service_principal(monkeypatch):
    """Service principal config (client_id + client_secret)."""
    set_config_for_test(
        databricks_host="https://test.cloud.databricks.com",
        databricks_client_id="client-id",
        databricks_client_secret="client-secret",
        databricks_token=None,
    )
    config = DatabricksAuthentication().get_databricks_config()
    assert config.client_id == "client-id"
    assert config.client_secret == "client-secret"
    assert config.host == "https://test.cloud.databricks.com"
    assert config.token is None

def test_manual_token(monkeypatch):
    """Manual token config (host + token)."""
    set_config_for_test(
        databricks_host="https://test.cloud.databricks.com",
        databricks_token="token-123",
        databricks_client_id=None,
        databricks_client_secret=None,
    )
    config = DatabricksAuthentication().get_databricks_config()
    assert config.token == "token-123"
    assert config.host == "https://test.cloud.databricks.com"
    assert config.client_id is None

def test_config_profile(monkeypatch):
    """Named profile from ~/.databrickscfg."""
    set_config_for_test(databricks_host=None, databricks_config_profile="sales-dev")
    config = DatabricksAuthentication().get_databricks_config()
    assert config.profile == "sales-dev"
    assert config.host is None

def test_cli(monkeypatch):
    """CLI config (host only)."""
    set_config_for_test(
        databricks_host="https://test.cloud.databricks.com",
        databricks_token=None,
        databricks_client_id=None,
        databricks_client_secret=None,
    )
    config = DatabricksAuthentication().get_databricks_config()
    assert config.host == "https://test.cloud.databricks.com"
    assert config.token is None
    assert config.profile is None

def test_missing_config(monkeypatch):
    """Error if no config is available."""
    set_config_for_test(
        databricks_host=None,
        databricks_token=None,
        databricks_client_id=None,
        databricks_client_secret=None,
    )
    with pytest.raises(RuntimeError):
        DatabricksAuthentication().get_databricks_config()

def test_lakebase_url(workspace_client):
    """Lakebase URL uses the instance DNS and a freshly minted credential."""
    set_config_for_test(databricks_host="https://test.cloud.databricks.com")
    url = DatabricksAuthentication().get_lakebase_url("sales-db", "databricks_postgres")
    assert url.drivername == "postgresql+psycopg2"
    assert url.host == "instance-123.database.cloud.databricks.com"
    assert url.port == 5432
    assert url.database == "databricks_postgres"
    assert url.username == "analyst@example.com"
    assert url.password == "short-lived-token"
    assert url.query["sslmode"] == "require"
    workspace_client.database.get_database_instance.assert_called_once_with(name="sales-db")
    _, kwargs = workspace_client.database.generate_database_credential.call_args
    assert kwargs["instance_names"] == ["sales-db"]

def test_lakebase_url_service_principal(workspace_client):
    """A service principal connects as its client id."""
    set_config_for_test(
        databricks_host="https://test.cloud.databricks.com",
        databricks_client_id="client-id",
        databricks_client_secret="client-secret",
    )
    url = DatabricksAuthentication().get_lakebase_url("sales-db", "sales")
    assert url.username == "client-id"
    assert url.database == "sales"
    workspace_client.current_user.me.assert_not_called()

def test_engine_from_lakebase_config(workspace_client):
    """The SQL store engine is built from the Lakebase instance when no DATABASE_URL is set."""
    pytest.importorskip("psycopg2")
    from sales_dashboard.data.util import get_engine

    set_config_for_test(databricks_host="https://test.cloud.databricks.com", lakebase_instance_name="sales-db")
    engine = get_engine()
    try:
        assert engine.url.host == "instance-123.database.cloud.databricks.com"
        assert engine.dialect.name == "postgresql"
    finally:
        engine.dispose()
