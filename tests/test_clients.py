"""Tests for the GitLab and Vault clients."""

from unittest.mock import MagicMock

import pytest
import requests

from vglink.clients.gitlab import GitLabPlatform, Group, Project
from vglink.clients.vault import VaultTokenIssuer
from vglink.utils.errors import PlatformError, SecretIssueError


def _response(status_code=200, json_data=None, headers=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.headers = headers or {}
    response.text = text
    return response


class TestGitLabPlatform:
    """Test GitLab API calls."""

    def setup_method(self):
        """Setup test environment."""
        self.session = MagicMock()
        self.session.headers = {}
        self.platform = GitLabPlatform("https://gitlab.example.com/api/v4/", "glpat", session=self.session)

    def test_token_header(self):
        assert self.session.headers["PRIVATE-TOKEN"] == "glpat"
        assert self.platform.base_url == "https://gitlab.example.com/api/v4"

    def test_list_groups_follows_pages(self):
        self.session.request.side_effect = [
            _response(json_data=[{"id": 1, "full_path": "infra"}], headers={"X-Next-Page": "2"}),
            _response(json_data=[{"id": 2, "full_path": "web"}], headers={"X-Next-Page": ""}),
        ]

        groups = self.platform.list_groups()

        assert groups == [Group(1, "infra"), Group(2, "web")]
        assert self.session.request.call_count == 2
        second = self.session.request.call_args_list[1]
        assert second.args == ("GET", "https://gitlab.example.com/api/v4/groups")
        assert second.kwargs["params"]["page"] == "2"

    def test_list_projects(self):
        self.session.request.return_value = _response(
            json_data=[{"id": 42, "path_with_namespace": "infra/app", "name": "app"}]
        )

        projects = self.platform.list_projects(Group(1, "infra"))

        assert projects == [Project(42, "infra/app")]
        method, url = self.session.request.call_args.args
        assert url == "https://gitlab.example.com/api/v4/groups/1/projects"

    def test_update_variable(self):
        self.session.request.return_value = _response()

        self.platform.update_variable(42, "VAULT_TOKEN", "s.token")

        self.session.request.assert_called_once_with(
            "PUT",
            "https://gitlab.example.com/api/v4/projects/42/variables/VAULT_TOKEN",
            timeout=30.0,
            data={"value": "s.token"},
        )

    def test_update_missing_variable_raises(self):
        self.session.request.return_value = _response(404, text='{"message":"404 Variable Not Found"}')

        with pytest.raises(PlatformError) as exc_info:
            self.platform.update_variable(42, "VAULT_TOKEN", "s.token")

        assert exc_info.value.status_code == 404

    def test_create_variable(self):
        self.session.request.return_value = _response(201)

        self.platform.create_variable(42, "VAULT_TOKEN", "s.token")

        self.session.request.assert_called_once_with(
            "POST",
            "https://gitlab.example.com/api/v4/projects/42/variables",
            timeout=30.0,
            data={"key": "VAULT_TOKEN", "value": "s.token"},
        )

    def test_unauthorized_has_suggestions(self):
        self.session.request.return_value = _response(401)

        with pytest.raises(PlatformError) as exc_info:
            self.platform.list_groups()

        assert exc_info.value.suggestions

    def test_transport_error_wrapped(self):
        self.session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(PlatformError) as exc_info:
            self.platform.list_groups()

        assert "refused" in exc_info.value.details

    def test_non_json_body_raises_platform_error(self):
        response = _response(text="<html>Sign in</html>")
        response.json.side_effect = ValueError("Expecting value")
        self.session.request.return_value = response

        with pytest.raises(PlatformError) as exc_info:
            self.platform.list_groups()

        assert "non-JSON" in exc_info.value.message
        assert "Sign in" in exc_info.value.details

    def test_non_list_body_raises_platform_error(self):
        self.session.request.return_value = _response(json_data={"message": "moved"})

        with pytest.raises(PlatformError):
            self.platform.list_groups()

    @pytest.mark.parametrize(
        "item",
        [{"path_with_namespace": "infra/app"}, {"id": 42}, "infra/app"],
    )
    def test_malformed_project_raises_platform_error(self, item):
        self.session.request.return_value = _response(json_data=[item])

        with pytest.raises(PlatformError) as exc_info:
            self.platform.list_projects(Group(1, "infra"))

        assert "Malformed" in exc_info.value.message


class TestVaultTokenIssuer:
    """Test Vault token creation."""

    def setup_method(self):
        """Setup test environment."""
        self.session = MagicMock()
        self.session.headers = {}
        self.issuer = VaultTokenIssuer("https://vault:8200/", "root", namespace="ci", session=self.session)

    def test_headers(self):
        assert self.session.headers["X-Vault-Token"] == "root"
        assert self.session.headers["X-Vault-Namespace"] == "ci"
        assert self.session.verify is True

    def test_issue_posts_token_spec(self):
        spec = {"policies": ["ci-read"], "ttl": "2h"}
        self.session.post.return_value = _response(json_data={"auth": {"client_token": "s.abc"}})

        assert self.issuer.issue(spec) == "s.abc"
        self.session.post.assert_called_once_with(
            "https://vault:8200/v1/auth/token/create",
            json=spec,
            timeout=30.0,
        )

    def test_issue_without_spec_sends_empty_body(self):
        self.session.post.return_value = _response(json_data={"auth": {"client_token": "s.abc"}})

        self.issuer.issue(None)

        assert self.session.post.call_args.kwargs["json"] == {}

    def test_permission_denied(self):
        self.session.post.return_value = _response(403, text='{"errors":["permission denied"]}')

        with pytest.raises(SecretIssueError) as exc_info:
            self.issuer.issue({})

        assert "403" in exc_info.value.message
        assert exc_info.value.suggestions

    def test_missing_auth_block(self):
        self.session.post.return_value = _response(json_data={"data": {}})

        with pytest.raises(SecretIssueError):
            self.issuer.issue({})

    def test_transport_error_wrapped(self):
        self.session.post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(SecretIssueError):
            self.issuer.issue({})

    def test_skip_verify(self):
        session = MagicMock()
        session.headers = {}

        VaultTokenIssuer("https://vault:8200", "root", verify=False, session=session)

        assert session.verify is False
        assert "X-Vault-Namespace" not in session.headers
